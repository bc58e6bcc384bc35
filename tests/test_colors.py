import random

import pytest
from colors import channel_distance, hex_to_luminance, hex_to_rgb, is_hex_color, perturb_color, random_color, rgb_to_hex

def test_luminance_extremes():
    assert hex_to_luminance("#000000") == pytest.approx(0.0)
    assert hex_to_luminance("#ffffff") == pytest.approx(1.0)

def test_luminance_channel_weights():
    assert hex_to_luminance("#ff0000") == pytest.approx(0.2126)
    assert hex_to_luminance("#00ff00") == pytest.approx(0.7152)
    assert hex_to_luminance("#0000ff") == pytest.approx(0.0722)

def test_luminance_linear_segment():
    # 10/255 is below the 0.04045 knee
    assert hex_to_luminance("#0a0a0a") == pytest.approx((10 / 255) / 12.92)

@pytest.mark.parametrize("shift", [16, 8, 0])
def test_luminance_monotonic_per_channel(shift):
    others = 0x40 << ((shift + 8) % 24) | 0x80 << ((shift + 16) % 24)
    values = [hex_to_luminance(f"#{(others | (v << shift)):06x}") for v in range(256)]
    assert all(a <= b for a, b in zip(values, values[1:]))

def test_hex_rgb_conversion():
    assert hex_to_rgb("#4f46e5") == (79, 70, 229)
    assert hex_to_rgb("4F46E5") == (79, 70, 229)
    assert rgb_to_hex((79, 70, 229)) == "#4f46e5"
    assert rgb_to_hex((0, 0, 0)) == "#000000"

def test_random_color_format():
    rng = random.Random(1)
    for _ in range(50):
        c = random_color(rng)
        assert len(c) == 7 and c.startswith("#")
        int(c[1:], 16)

def test_perturb_color_stays_in_range_and_bounded():
    rng = random.Random(7)
    for base in ("#000000", "#ffffff", "#808080", "#10f0a0"):
        for _ in range(100):
            out = perturb_color(base, 1.0, rng)
            assert all(0 <= c <= 255 for c in hex_to_rgb(out))
            assert channel_distance(base, out) <= 80

def test_perturb_color_mid_gray_always_moves():
    rng = random.Random(3)
    for _ in range(100):
        assert channel_distance("#808080", perturb_color("#808080", 0.2, rng)) >= 4

@pytest.mark.parametrize("text,ok", [
    ("#4f46e5", True),
    ("4F46E5", True),
    ("#4f46e", False),
    ("zz", False),
    ("#4f46e5f", False),
])
def test_is_hex_color(text, ok):
    assert is_hex_color(text) is ok
