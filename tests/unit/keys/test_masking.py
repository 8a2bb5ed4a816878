"""Unit tests for secret masking."""

from __future__ import annotations

import pytest

from keyforge.keys import token
from keyforge.keys.masking import MASK_CHAR, mask


class TestMask:
    def test_keeps_first_four_and_masks_rest(self):
        assert mask("abcdefgh") == "abcd****"

    def test_generated_secret_properties(self):
        """Masked form preserves length and prefix, everything else is masked."""
        for _ in range(20):
            secret = token.generate()
            masked = mask(secret)

            assert len(masked) == len(secret)
            assert masked[:4] == secret[:4]
            assert set(masked[4:]) == {MASK_CHAR}

    @pytest.mark.parametrize("secret", ["", "a", "abc", "abcd"])
    def test_short_secret_returned_unchanged(self, secret):
        assert mask(secret) == secret

    def test_five_chars_masks_one(self):
        assert mask("abcde") == "abcd*"

    def test_custom_mask_char_and_visible(self):
        assert mask("abcdefgh", visible=2, mask_char="x") == "abxxxxxx"

    def test_does_not_mutate_or_depend_on_state(self):
        secret = "sk-same-input-twice"
        assert mask(secret) == mask(secret)
