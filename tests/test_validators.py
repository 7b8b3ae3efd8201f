"""Tests for input sanitizing, redirect target parsing and code generation."""

import pytest

from shortener.core.exceptions import UrlInvalidError
from shortener.core.setting import BASE62_ALPHABET
from shortener.core.validators import parse_redirect_target, sanitize_short_code
from shortener.services.code_generator import code_generator, generate_code


class TestSanitizeShortCode:
    """Test short code sanitizing."""

    def test_valid_codes(self):
        assert sanitize_short_code("Ab3dE9") == "Ab3dE9"
        assert sanitize_short_code(" Ab3dE9 ") == "Ab3dE9"

    @pytest.mark.parametrize("code", ["", "abc-12", "../etc", "a" * 21, "ab cd", "ab%20c"])
    def test_invalid_codes(self, code):
        assert sanitize_short_code(code) is None


class TestParseRedirectTarget:
    """Test validation of stored URLs at redirect time."""

    @pytest.mark.parametrize("url", [
        "https://example.com/a",
        "http://localhost:8080/path?query=value#frag",
        "not a url at all",
        "https://example.com/ünïcode",
    ])
    def test_usable_targets(self, url):
        assert parse_redirect_target(url) == url

    @pytest.mark.parametrize("url", [
        "",
        " https://example.com",
        "https://example.com/\r\nSet-Cookie: x=1",
        "https://example.com/\x00",
        "http://[::1",
    ])
    def test_unusable_targets(self, url):
        with pytest.raises(UrlInvalidError) as excinfo:
            parse_redirect_target(url)
        assert excinfo.value.url == url


class TestCodeGenerator:
    """Test random short code generation."""

    def test_default_length_and_alphabet(self):
        for _ in range(100):
            code = generate_code()
            assert len(code) == 6
            assert all(c in BASE62_ALPHABET for c in code)
            assert sanitize_short_code(code) == code

    def test_bound_generator(self):
        generate = code_generator(length=4, alphabet="xy")
        codes = {generate() for _ in range(50)}
        assert all(len(code) == 4 and set(code) <= {"x", "y"} for code in codes)

    def test_codes_vary(self):
        codes = {generate_code() for _ in range(1000)}
        # 62^6 possibilities; 1000 draws colliding would point at a broken RNG
        assert len(codes) > 990
