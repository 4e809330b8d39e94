# Named colors as CIE xy coordinates in the bridge's native gamut.
# Lookup is case-insensitive, unknown names fall back to "white".
XY_COLORS: dict[str, dict[str, float]] = {
    "white": {"x": 0.3227, "y": 0.329},
    "warmwhite": {"x": 0.4573, "y": 0.41},
    "coldwhite": {"x": 0.3016, "y": 0.3161},
    "red": {"x": 0.6915, "y": 0.3083},
    "orange": {"x": 0.5916, "y": 0.3824},
    "yellow": {"x": 0.4432, "y": 0.5154},
    "lime": {"x": 0.4091, "y": 0.518},
    "green": {"x": 0.17, "y": 0.7},
    "cyan": {"x": 0.1607, "y": 0.3423},
    "blue": {"x": 0.1532, "y": 0.0475},
    "purple": {"x": 0.2725, "y": 0.1096},
    "magenta": {"x": 0.3787, "y": 0.1724},
    "pink": {"x": 0.3944, "y": 0.3093},
}

DEFAULT_COLOR = "white"


def lookup_xy(name: str) -> dict[str, float]:
    xy = XY_COLORS.get(name.strip().lower()) or XY_COLORS[DEFAULT_COLOR]
    return dict(xy)
