"""Colour conversion and naming helpers.

Conversions between RGB, HSV (host percent scale) and colour temperature, a
white-balance heuristic used to decide whether an RGB triple is "some kind of
white", and the generic colour names reported as the colorName attribute.
"""

import math

MIN_KELVIN = 2000
MAX_KELVIN = 6500
KELVIN_STEP = 100

# Max channel difference for a pair of channels to count as close
WHITE_CHANNEL_THRESHOLD = 30
# Max distance (normalised RGB space) from the black-body curve
WHITE_MATCH_TOLERANCE = 0.15

HUE_NAMES = [
    (15, 'Red'),
    (45, 'Orange'),
    (75, 'Yellow'),
    (105, 'Chartreuse'),
    (135, 'Green'),
    (165, 'Spring'),
    (195, 'Cyan'),
    (225, 'Azure'),
    (255, 'Blue'),
    (285, 'Violet'),
    (315, 'Magenta'),
    (345, 'Rose'),
]


def clamp(value: float, low: int, high: int) -> int:
    """Clamp and truncate a value to an integer range."""
    return int(max(low, min(value, high)))


def kelvin_to_rgb(kelvin: int) -> list[int]:
    """Approximate the RGB colour of a black body at the given temperature."""
    temp = kelvin / 100

    if temp <= 66:
        red = 255
        green = 99.4708025861 * math.log(temp) - 161.1195681661
        if temp <= 19:
            blue = 0
        else:
            blue = 138.5177312231 * math.log(temp - 10) - 305.0447927307
    else:
        red = 329.698727446 * math.pow(temp - 60, -0.1332047592)
        green = 288.1221695283 * math.pow(temp - 60, -0.0755148492)
        blue = 255

    return [clamp(red, 0, 255), clamp(green, 0, 255), clamp(blue, 0, 255)]


def _normalise(rgb: list[int]) -> tuple[float, float, float]:
    peak = max(rgb) or 1
    return (rgb[0] / peak, rgb[1] / peak, rgb[2] / peak)


def is_plausible_white(r: int, g: int, b: int) -> bool:
    """Cheap gate before estimating a colour temperature.

    At least one pair of channels must sit within WHITE_CHANNEL_THRESHOLD of
    each other. Past that, a triple qualifies when all channels are close, or
    when they are ordered the way a black body's are (red > green > blue for
    warm light, blue > green > red for cool light).
    """
    differences = (abs(r - g), abs(r - b), abs(g - b))
    if min(differences) > WHITE_CHANNEL_THRESHOLD:
        return False
    if max(differences) <= WHITE_CHANNEL_THRESHOLD:
        return True
    return r > g > b or b > g > r



def estimate_colour_temperature(r: int, g: int, b: int) -> int | None:
    """Estimate the colour temperature of an RGB triple.

    Returns:
        Kelvin value in [MIN_KELVIN, MAX_KELVIN] (100 K steps), or None if the
        colour is not plausibly a white
    """
    if r is None or g is None or b is None:
        return None
    if max(r, g, b) == 0 or not is_plausible_white(r, g, b):
        return None

    target = _normalise([r, g, b])
    best_kelvin = None
    best_distance = None
    for kelvin in range(MIN_KELVIN, MAX_KELVIN + 1, KELVIN_STEP):
        candidate = _normalise(kelvin_to_rgb(kelvin))
        distance = math.dist(target, candidate)
        if best_distance is None or distance < best_distance:
            best_kelvin, best_distance = kelvin, distance

    if best_distance > WHITE_MATCH_TOLERANCE:
        return None
    return best_kelvin


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[int, int]:
    """Convert RGB to host hue and saturation, both 0-100."""
    hue = rgb_to_hue_degrees(r, g, b)
    cmax = max(r, g, b) / 255
    cmin = min(r, g, b) / 255
    saturation = 0 if cmax == 0 else (cmax - cmin) / cmax
    return round(hue / 3.6), round(saturation * 100)


def rgb_to_hue_degrees(r: int, g: int, b: int) -> float:
    R, G, B = r / 255, g / 255, b / 255
    cmax = max(R, G, B)
    delta = cmax - min(R, G, B)
    if delta == 0:
        return 0.0

    if cmax == R:
        hue = 60 * (((G - B) / delta) % 6)
    elif cmax == G:
        hue = 60 * (((B - R) / delta) + 2)
    else:
        hue = 60 * (((R - G) / delta) + 4)
    return hue + 360 if hue < 0 else hue


def hsv_to_rgb(hue: float, saturation: float, value: float) -> list[int]:
    """Convert host HSV (each 0-100) to RGB."""
    hue, saturation, value = hue / 100, saturation / 100, value / 100

    h = int(hue * 6)
    f = hue * 6 - h
    p = value * (1 - saturation)
    q = value * (1 - f * saturation)
    t = value * (1 - (1 - f) * saturation)

    sector = {
        0: (value, t, p),
        1: (q, value, p),
        2: (p, value, t),
        3: (p, q, value),
        4: (t, p, value),
        5: (value, p, q),
        6: (value, t, p),  # hue == 100 wraps to red
    }.get(h, (0, 0, 0))
    return [int(c * 255) for c in sector]


def parse_hex_colour(hex_colour: str) -> list[int] | None:
    """Parse 'RRGGBB' or 'RGB' (optionally with '#') into an RGB triple."""
    if not isinstance(hex_colour, str):
        return None

    clean = hex_colour.strip().lstrip('#').upper()
    if len(clean) == 3:
        clean = ''.join(c * 2 for c in clean)
    if len(clean) != 6:
        return None

    try:
        return [int(clean[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError:
        return None


def name_from_hue(hue_degrees: float) -> str:
    """Generic name of a hue, in twelve 30 degree bands centred on the primaries."""
    degrees = int(hue_degrees) % 360
    for upper, name in HUE_NAMES:
        if degrees <= upper:
            return name
    return 'Red'


def name_from_temperature(kelvin: int) -> str:
    """Generic name of a white point."""
    if kelvin <= 2000:
        return 'Sodium'
    if kelvin < 2800:
        return 'Incandescent'
    if kelvin < 3500:
        return 'Warm White'
    if kelvin <= 5000:
        return 'Daylight'
    if kelvin <= 6500:
        return 'Skylight'
    return 'Polar'
