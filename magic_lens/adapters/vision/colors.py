"""
Named-color classifier for the center sample.

Pipeline:
  1. Convert the averaged RGB swatch to HSL (degrees / percent)
  2. Look up the target's ColorProfile
  3. Achromatic targets (black, white, gray): lightness band only
  4. Everything else: circular hue range + min saturation + lightness band

Hue ranges are circular: red is [345, 15] and wraps through 0.
Thresholds are generous on purpose; webcam white balance drifts a lot.
"""
from dataclasses import dataclass

from magic_lens.orchestrator.contracts import HSL, RGB


@dataclass(frozen=True)
class ColorProfile:
    hue_range: tuple[float, float]
    min_saturation: float
    min_lightness: float
    max_lightness: float


# Low-saturation (lenient) table. Brown overlaps orange's hue on purpose and
# is told apart by its dark lightness band.
COLOR_PROFILES: dict[str, ColorProfile] = {
    "red":    ColorProfile((345, 15),  14, 20, 85),
    "orange": ColorProfile((16, 40),   12, 20, 88),
    "yellow": ColorProfile((41, 70),   10, 22, 95),
    "green":  ColorProfile((71, 165),  12, 20, 90),
    "blue":   ColorProfile((166, 255), 10, 18, 90),
    "purple": ColorProfile((256, 320), 12, 15, 85),
    "pink":   ColorProfile((321, 344), 10, 30, 95),
    "brown":  ColorProfile((16, 35),   10, 10, 45),
    "black":  ColorProfile((0, 359),    0,  0, 15),
    "white":  ColorProfile((0, 359),    0, 82, 100),
    "gray":   ColorProfile((0, 359),    0, 15, 82),
}

ACHROMATIC = frozenset({"black", "white", "gray"})


def normalize_label(value: str | None) -> str:
    return (value or "").strip().lower()


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    nr, ng, nb = r / 255, g / 255, b / 255
    hi = max(nr, ng, nb)
    lo = min(nr, ng, nb)
    light = (hi + lo) / 2
    delta = hi - lo

    hue = 0.0
    sat = 0.0
    if delta != 0:
        sat = delta / (1 - abs(2 * light - 1))
        if hi == nr:
            hue = 60 * (((ng - nb) / delta) % 6)
        elif hi == ng:
            hue = 60 * ((nb - nr) / delta + 2)
        else:
            hue = 60 * ((nr - ng) / delta + 4)

    hue %= 360
    # float noise can push s a hair past 1 for near-saturated inputs
    sat = min(max(sat, 0.0), 1.0)
    return HSL(h=hue, s=sat * 100, l=light * 100)


def hue_in_range(h: float, start: float, end: float) -> bool:
    if start <= end:
        return start <= h <= end
    return h >= start or h <= end


def is_color_match(avg_rgb: RGB, color_name: str) -> bool:
    name = normalize_label(color_name)
    profile = COLOR_PROFILES.get(name)
    if profile is None:
        return False

    hsl = rgb_to_hsl(avg_rgb.r, avg_rgb.g, avg_rgb.b)
    light_ok = profile.min_lightness <= hsl.l <= profile.max_lightness
    if name in ACHROMATIC:
        return light_ok

    start, end = profile.hue_range
    return (
        hue_in_range(hsl.h, start, end)
        and hsl.s >= profile.min_saturation
        and light_ok
    )
