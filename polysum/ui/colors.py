"""Theme colors and color utilities for the UI."""

import colorsys


class GameColors:
    """Light theme palette."""

    BG_TOP = "#eef2ff"
    BG_BOTTOM = "#e0f7fa"

    PRIMARY = "#667eea"
    PRIMARY_DARK = "#4c51bf"

    SELECTION_GLOW = "#667eea"
    HINT_GLOW = "#FFD700"
    CORRECT = "#2FBF93"
    INCORRECT = "#F26A5A"

    CARD_BG = "rgba(255, 255, 255, 0.85)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#1a2a3a"
    TEXT_SECONDARY = "#4a5572"
    TEXT_MUTED = "#78909c"


# One color per polygon, keyed by side count.
SHAPE_COLORS = {
    3: "#FF6B6B",
    4: "#4ECDC4",
    5: "#FFE66D",
    6: "#95E1A3",
    7: "#DDA0DD",
    8: "#FFA07A",
    9: "#87CEEB",
    10: "#FFB6C1",
}

FALLBACK_SHAPE_COLOR = "#B0BEC5"


def shape_color(sides: int) -> str:
    return SHAPE_COLORS.get(sides, FALLBACK_SHAPE_COLOR)


def goal_color(goal: int) -> str:
    """Hue that rotates 30 degrees per goal step, at 70% saturation and 60% lightness."""
    hue = ((goal * 30) % 360) / 360.0
    r, g, b = colorsys.hls_to_rgb(hue, 0.6, 0.7)
    return f"#{round(r * 255):02X}{round(g * 255):02X}{round(b * 255):02X}"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except ValueError:
        return a
