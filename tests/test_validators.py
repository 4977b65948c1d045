"""
Tests for input validators.
"""

import pytest

from utils.validators import any_blank, is_blank, normalize_identity, too_long


class TestValidators:
    @pytest.mark.parametrize("value", [None, "", " ", "\t\n"])
    def test_blank_values(self, value):
        assert is_blank(value) is True

    def test_non_blank_value(self):
        assert is_blank(" x ") is False

    def test_any_blank(self):
        assert any_blank(["a", "b", " "]) is True
        assert any_blank(["a", "b", "c"]) is False

    def test_normalize_identity(self):
        assert normalize_identity("  A@X.com ") == "a@x.com"

    def test_too_long_ignores_surrounding_whitespace(self):
        assert too_long("  abc  ", 3) is False
        assert too_long("abcd", 3) is True
        assert too_long(None, 3) is False
