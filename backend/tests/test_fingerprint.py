import pytest

from app.services.fingerprint import (
    DeviceSignals, build_components, compute_fingerprint, rolling_hash
)

DESKTOP = DeviceSignals(
    user_agent="Mozilla/5.0 (X11; Linux x86_64) Firefox/131.0",
    language="en-GB",
    screen_width=1920,
    screen_height=1080,
    color_depth=24,
    timezone_offset=-60,
    hardware_concurrency=8,
    canvas="data:image/png;base64," + "A" * 120 + "tail-of-canvas",
)


def test_rolling_hash_small_values():
    assert rolling_hash("") == 0
    assert rolling_hash("a") == 97
    assert rolling_hash("ab") == 97 * 31 + 98


def test_rolling_hash_walks_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00 in UTF-16
    assert rolling_hash("\U0001F600") == 0xD83D * 31 + 0xDE00


def test_rolling_hash_wraps_to_signed_32_bits():
    value = rolling_hash("x" * 500)
    assert -2 ** 31 <= value < 2 ** 31


def test_components_order_and_canvas_sample():
    components = build_components(DESKTOP).split("|")
    assert components[:6] == [
        "Mozilla/5.0 (X11; Linux x86_64) Firefox/131.0",
        "en-GB",
        "1920x1080",
        "24",
        "-60",
        "8",
    ]
    assert len(components[6]) == 50
    assert components[6].endswith("tail-of-canvas")


def test_missing_signals_render_empty():
    signals = DeviceSignals(user_agent="UA", hardware_concurrency=0)
    assert build_components(signals) == "UA||||||"


def test_fingerprint_is_deterministic():
    assert compute_fingerprint(DESKTOP) == compute_fingerprint(DESKTOP.model_copy())


def test_fingerprint_format():
    fingerprint = compute_fingerprint(DESKTOP)
    assert fingerprint.startswith("fp_")
    assert fingerprint[3:].isalnum()
    assert fingerprint[3:] == fingerprint[3:].lower()


def test_different_devices_differ():
    phone = DESKTOP.model_copy(update={"screen_width": 390, "screen_height": 844})
    assert compute_fingerprint(phone) != compute_fingerprint(DESKTOP)


@pytest.mark.parametrize("signals", [None, DeviceSignals(), DeviceSignals(user_agent="", canvas="")])
def test_no_signals_means_no_fingerprint(signals):
    assert compute_fingerprint(signals) == ""


def test_canvas_only_signals_still_fingerprint():
    assert compute_fingerprint(DeviceSignals(canvas="data:image/png;base64,AAAA")).startswith("fp_")
