from __future__ import annotations


def clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into [-180, 180)."""
    return (float(angle) + 180.0) % 360.0 - 180.0


def lerp_angle_degrees(a: float, b: float, t: float) -> float:
    """Interpolate from `a` towards `b` along the shortest arc.

    The result is not wrapped, so it stays continuous with `a`.
    """
    return a + wrap_degrees(b - a) * t
