# =============================================================================
# lib/user_agent.py - User-Agent Parsing
# =============================================================================
# Lightweight parsing of User-Agent headers into device type, browser and OS
# for the session list. Order of the checks matters: Edge and Opera also
# advertise "chrome/", and Chrome advertises "safari/".
# =============================================================================

import re
from dataclasses import dataclass

_MOBILE_RE = re.compile(r"mobile|iphone|ipod|android.*mobile|windows phone|blackberry")
_TABLET_RE = re.compile(r"tablet|ipad|android(?!.*mobile)")


@dataclass(frozen=True)
class ParsedUserAgent:
    device_type: str  # "desktop" | "mobile" | "tablet" | "unknown"
    browser: str
    os: str


def _detect_device_type(ua: str) -> str:
    if _MOBILE_RE.search(ua):
        return "mobile"
    if _TABLET_RE.search(ua):
        return "tablet"
    return "desktop"


def _detect_browser(ua: str) -> str:
    if "edg/" in ua or "edge/" in ua:
        return "Edge"
    if "opr/" in ua or "opera" in ua:
        return "Opera"
    if "chrome/" in ua and "chromium" not in ua:
        return "Chrome"
    if "firefox/" in ua:
        return "Firefox"
    if "safari/" in ua and "chrome" not in ua:
        return "Safari"
    if "msie" in ua or "trident/" in ua:
        return "Internet Explorer"
    return "Unknown"


def _detect_os(ua: str) -> str:
    if "windows nt 10" in ua:
        return "Windows 10/11"
    if "windows nt 6.3" in ua:
        return "Windows 8.1"
    if "windows nt 6.2" in ua:
        return "Windows 8"
    if "windows nt 6.1" in ua:
        return "Windows 7"
    if "windows" in ua:
        return "Windows"
    if "iphone" in ua or "ipad" in ua:
        return "iOS"
    if "mac os x" in ua:
        return "macOS"
    if "android" in ua:
        return "Android"
    if "linux" in ua:
        return "Linux"
    if "cros" in ua:
        return "Chrome OS"
    return "Unknown"


def parse_user_agent(user_agent: str | None) -> ParsedUserAgent:
    """
    Parse a User-Agent header.

    Args:
        user_agent: Raw header value (may be None or empty)

    Returns:
        ParsedUserAgent; all fields unknown when no header was sent

    Example:
        parse_user_agent("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) ... Safari/604.1")
        # ParsedUserAgent(device_type="mobile", browser="Safari", os="iOS")
    """
    if not user_agent:
        return ParsedUserAgent(device_type="unknown", browser="Unknown", os="Unknown")

    ua = user_agent.lower()
    return ParsedUserAgent(
        device_type=_detect_device_type(ua),
        browser=_detect_browser(ua),
        os=_detect_os(ua),
    )


def get_device_description(parsed: ParsedUserAgent) -> str:
    """Short label such as "Chrome on macOS" or "Safari on iOS (mobile)"."""
    parts = []
    if parsed.browser != "Unknown":
        parts.append(parsed.browser)
    if parsed.os != "Unknown":
        parts.append(f"on {parsed.os}")
    if parsed.device_type not in ("desktop", "unknown"):
        parts.append(f"({parsed.device_type})")
    return " ".join(parts) if parts else "Unknown device"
