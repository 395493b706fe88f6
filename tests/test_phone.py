"""
Tests for admitlead/utils/phone.py - Korean phone normalization and masking.
"""
import pytest

from admitlead.utils.phone import digits_only, mask_phone, normalize_phone


# ---------------------------------------------------------------------------
# normalize_phone
# ---------------------------------------------------------------------------

class TestNormalizePhone:
    def test_eleven_digit_mobile(self):
        assert normalize_phone("01012345678") == "010-1234-5678"

    def test_already_dashed(self):
        assert normalize_phone("010-1234-5678") == "010-1234-5678"

    def test_spaces_and_dots(self):
        assert normalize_phone("010 1234 5678") == "010-1234-5678"
        assert normalize_phone("010.1234.5678") == "010-1234-5678"

    def test_ten_digit_number_uses_three_three_four(self):
        assert normalize_phone("0212345678") == "021-234-5678"
        assert normalize_phone("011-123-4567") == "011-123-4567"

    @pytest.mark.parametrize("raw", ["12345", "+82 10 1234 5678", "abc"])
    def test_other_lengths_returned_unchanged(self, raw):
        assert normalize_phone(raw) == raw

    def test_empty_and_none(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""

    def test_idempotent(self):
        """Equality matching across submissions depends on a stable form."""
        once = normalize_phone("010 9876 5432")
        assert normalize_phone(once) == once


class TestDigitsOnly:
    def test_strips_formatting(self):
        assert digits_only("010-1234-5678") == "01012345678"

    def test_none(self):
        assert digits_only(None) == ""


class TestMaskPhone:
    def test_masks_after_six_characters(self):
        assert mask_phone("010-1234-5678") == "010-12***"

    def test_short_value_kept(self):
        assert mask_phone("0101") == "0101"

    def test_empty(self):
        assert mask_phone("") == "unknown"
