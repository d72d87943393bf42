"""Theme colors and color utilities for the UI."""

from typemaster.core.models import CharacterStatus


class ThemeColors:
    """Dark theme palette."""

    BACKGROUND = "#1e1f24"
    SURFACE = "#26282e"

    PRIMARY = "#00acc1"
    ACCENT = "#ffb74d"
    SUCCESS = "#69f0ae"
    ERROR = "#ff6e6e"

    TEXT_PRIMARY = "#e8eaed"
    TEXT_SECONDARY = "#9aa0a6"
    TEXT_MUTED = "#5f6368"


STATUS_COLORS = {
    CharacterStatus.UNTYPED: ThemeColors.TEXT_MUTED,
    CharacterStatus.CURRENT: ThemeColors.TEXT_PRIMARY,
    CharacterStatus.CORRECT: ThemeColors.SUCCESS,
    CharacterStatus.INCORRECT: ThemeColors.ERROR,
}


def color_for_status(status: CharacterStatus) -> str:
    try:
        return STATUS_COLORS[CharacterStatus(status)]
    except ValueError:
        return ThemeColors.TEXT_MUTED


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
