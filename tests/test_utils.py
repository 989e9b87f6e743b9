"""Tests for shared utility functions."""

from datetime import timezone

from src.utils import normalize_phone, utc_now


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("98765 43210") == "9876543210"

    def test_strips_dashes(self):
        assert normalize_phone("98765-432-10") == "9876543210"

    def test_strips_parentheses(self):
        assert normalize_phone("(080) 2345 6789") == "08023456789"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+91 98765 43210") == "+919876543210"

    def test_clean_number_unchanged(self):
        assert normalize_phone("9876543210") == "9876543210"

    def test_strips_whitespace(self):
        assert normalize_phone("  9876543210  ") == "9876543210"

    def test_mixed_separators(self):
        assert normalize_phone("+91 (98765) 432-10") == "+919876543210"


class TestUtcNow:
    def test_is_timezone_aware_utc(self):
        now = utc_now()
        assert now.tzinfo is timezone.utc
