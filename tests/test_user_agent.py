# =============================================================================
# tests/test_user_agent.py - User-Agent Parsing Tests
# =============================================================================

import pytest

from lib.user_agent import ParsedUserAgent, get_device_description, parse_user_agent

CHROME_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
EDGE_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
CHROME_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)


class TestParseUserAgent:
    """Tests for parse_user_agent."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            (CHROME_MAC, ParsedUserAgent("desktop", "Chrome", "macOS")),
            (SAFARI_IPHONE, ParsedUserAgent("mobile", "Safari", "iOS")),
            (EDGE_WINDOWS, ParsedUserAgent("desktop", "Edge", "Windows 10/11")),
            (FIREFOX_LINUX, ParsedUserAgent("desktop", "Firefox", "Linux")),
            (CHROME_ANDROID, ParsedUserAgent("mobile", "Chrome", "Android")),
        ],
    )
    def test_known_browsers(self, header, expected):
        assert parse_user_agent(header) == expected

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        parsed = parse_user_agent(header)

        assert parsed.device_type == "unknown"
        assert parsed.browser == "Unknown"
        assert parsed.os == "Unknown"


class TestDeviceDescription:
    """Tests for get_device_description."""

    def test_desktop(self):
        assert get_device_description(parse_user_agent(CHROME_MAC)) == "Chrome on macOS"

    def test_mobile_gets_suffix(self):
        assert get_device_description(parse_user_agent(SAFARI_IPHONE)) == "Safari on iOS (mobile)"

    def test_unknown(self):
        assert get_device_description(parse_user_agent(None)) == "Unknown device"
