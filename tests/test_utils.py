"""Tests for shared utility functions."""

from src.utils import mask_email, mask_phone


class TestMaskEmail:
    def test_masks_local_and_domain(self):
        assert mask_email("priya.sharma@gmail.com") == "p*****@g***.com"

    def test_fixed_suffix_regardless_of_tld(self):
        assert mask_email("raj@example.co.in") == "r*****@e***.com"

    def test_empty_string(self):
        assert mask_email("") == ""

    def test_none(self):
        assert mask_email(None) == ""


class TestMaskPhone:
    def test_masks_all_but_last_four(self):
        assert mask_phone("9876543210") == "xxxxxx3210"

    def test_preserves_separators(self):
        assert mask_phone("+91 98765 43210") == "+xx xxxxx x3210"

    def test_last_four_kept_verbatim(self):
        assert mask_phone("12-34-56") == "xx-x4-56"

    def test_short_number_unchanged(self):
        assert mask_phone("123") == "123"

    def test_empty_string(self):
        assert mask_phone("") == ""
