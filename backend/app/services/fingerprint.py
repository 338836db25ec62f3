"""
Device Fingerprint Service - heuristic "same browser on same device" signal.

Combines weak browser signals (user agent, locale, screen geometry, color
depth, timezone offset, core count, a canvas rendering sample) and folds them
through a 32-bit rolling hash. The result is stable for an unchanged browser
and differs between devices with high probability, but it is NOT an identity
proof: it only deters one device from signing for several students.

The hash walks UTF-16 code units so a browser computing the same value
client-side gets the identical string.
"""

from typing import Optional
from pydantic import BaseModel, Field

FINGERPRINT_PREFIX = "fp_"
CANVAS_SAMPLE_CHARS = 50
COMPONENT_SEPARATOR = "|"

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class DeviceSignals(BaseModel):
    """Raw signals collected by the client. Every field may be missing."""
    user_agent: Optional[str] = Field(None, description="navigator.userAgent")
    language: Optional[str] = Field(None, description="navigator.language")
    screen_width: Optional[int] = Field(None, description="screen.width in CSS pixels")
    screen_height: Optional[int] = Field(None, description="screen.height in CSS pixels")
    color_depth: Optional[int] = Field(None, description="screen.colorDepth")
    timezone_offset: Optional[int] = Field(None, description="Date#getTimezoneOffset() in minutes")
    hardware_concurrency: Optional[int] = Field(None, description="navigator.hardwareConcurrency")
    canvas: Optional[str] = Field(None, description="Canvas toDataURL() output")

    def is_empty(self) -> bool:
        return not any(
            value not in (None, "")
            for value in self.model_dump().values()
        )


def _text(value) -> str:
    return "" if value is None else str(value)


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def rolling_hash(text: str) -> int:
    """
    32-bit signed rolling hash: ``h = h * 31 + unit`` wrapped to int32.

    Iterates UTF-16 code units, matching JavaScript's ``charCodeAt``.
    """
    value = 0
    encoded = text.encode("utf-16-le", errors="surrogatepass")
    for index in range(0, len(encoded), 2):
        unit = encoded[index] | (encoded[index + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def build_components(signals: DeviceSignals) -> str:
    """Join the available signals; missing ones contribute an empty string."""
    if signals.screen_width is None and signals.screen_height is None:
        geometry = ""
    else:
        geometry = "{}x{}".format(_text(signals.screen_width), _text(signals.screen_height))

    canvas = signals.canvas or ""
    parts = [
        _text(signals.user_agent),
        _text(signals.language),
        geometry,
        _text(signals.color_depth),
        _text(signals.timezone_offset),
        _text(signals.hardware_concurrency or ""),
        canvas[-CANVAS_SAMPLE_CHARS:],
    ]
    return COMPONENT_SEPARATOR.join(parts)


def compute_fingerprint(signals: Optional[DeviceSignals]) -> str:
    """
    Derive the device fingerprint for a signal set.

    Returns "" when no signal at all is available, which callers treat as
    "no fingerprint" and skip the device check.
    """
    if signals is None or signals.is_empty():
        return ""
    hashed = rolling_hash(build_components(signals))
    return FINGERPRINT_PREFIX + _to_base36(abs(hashed))
