"""Color mapping for display: organisms by characteristics, terrain by moisture."""

from __future__ import annotations

from .traits import (
    HerbivoreBounds,
    HerbivoreTraits,
    PredatorBounds,
    PredatorTraits,
    ProducerBounds,
    ProducerTraits,
)

# Terrain
TERRAIN_DRY = (176, 150, 102)  # Sandy tan
TERRAIN_WET = (52, 92, 70)  # Deep moss

HSL = tuple[float, float, float]
RGB = tuple[int, int, int]


def lerp_color(
    color1: tuple[int, int, int],
    color2: tuple[int, int, int],
    t: float,
) -> tuple[int, int, int]:
    """Linearly interpolate between two colors."""
    t = max(0.0, min(1.0, t))
    return (
        int(color1[0] + (color2[0] - color1[0]) * t),
        int(color1[1] + (color2[1] - color1[1]) * t),
        int(color1[2] + (color2[2] - color1[2]) * t),
    )


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """
    Convert HSL to RGB.

    Args:
        h: Hue in degrees (0-360)
        s: Saturation in percent (0-100)
        l: Lightness in percent (0-100)

    Returns:
        (red, green, blue), each 0-255
    """
    s /= 100
    l /= 100
    h %= 360

    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l - c / 2

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return (int((r + m) * 255), int((g + m) * 255), int((b + m) * 255))


def rgb_to_hex(color: RGB) -> int:
    """Pack an RGB tuple into 0xRRGGBB."""
    r, g, b = color
    return (r << 16) | (g << 8) | b


def producer_hsl(traits: ProducerTraits, bounds: ProducerBounds) -> HSL:
    """
    Green tones for trees.

    Hue 90-150 by optimal moisture, saturation 40-90% by spread chance,
    lightness 55-25% by crowding susceptibility (more susceptible = darker).
    """
    hue = 90 + bounds.optimal_moisture.normalize(traits.optimal_moisture) * 60
    saturation = 40 + bounds.spread_chance.normalize(traits.spread_chance) * 50
    lightness = 55 - bounds.crowding_susceptibility.normalize(traits.crowding_susceptibility) * 30
    return (hue, saturation, lightness)


def herbivore_hsl(traits: HerbivoreTraits, bounds: HerbivoreBounds) -> HSL:
    """
    Brown tones for deer.

    Hue 25-45 by speed, saturation 15-60% by reproduce chance,
    lightness 60-30% by crowding susceptibility.
    """
    hue = 25 + bounds.speed.normalize(traits.speed) * 20
    saturation = 15 + bounds.reproduce_chance.normalize(traits.reproduce_chance) * 45
    lightness = 60 - bounds.crowding_susceptibility.normalize(traits.crowding_susceptibility) * 30
    return (hue, saturation, lightness)


def predator_hsl(traits: PredatorTraits, bounds: PredatorBounds) -> HSL:
    """
    Grey-blue tones for wolves.

    Hue 200-240 by crowding susceptibility, saturation 5-25% by reproduce
    chance, lightness 20-45% by speed.
    """
    hue = 200 + bounds.crowding_susceptibility.normalize(traits.crowding_susceptibility) * 40
    saturation = 5 + bounds.reproduce_chance.normalize(traits.reproduce_chance) * 20
    lightness = 20 + bounds.speed.normalize(traits.speed) * 25
    return (hue, saturation, lightness)


def producer_color(traits: ProducerTraits, bounds: ProducerBounds) -> RGB:
    return hsl_to_rgb(*producer_hsl(traits, bounds))


def herbivore_color(traits: HerbivoreTraits, bounds: HerbivoreBounds) -> RGB:
    return hsl_to_rgb(*herbivore_hsl(traits, bounds))


def predator_color(traits: PredatorTraits, bounds: PredatorBounds) -> RGB:
    return hsl_to_rgb(*predator_hsl(traits, bounds))


def moisture_color(moisture: float) -> RGB:
    """Get the ground color for a moisture value (0-1)."""
    return lerp_color(TERRAIN_DRY, TERRAIN_WET, moisture)
