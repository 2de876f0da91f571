"""Geometria de graficos de linea (sin dependencias de Kivy)."""

from __future__ import annotations

from collections.abc import Sequence


def value_domain(
    values: Sequence[float],
    domain: tuple[float, float] | None = None,
) -> tuple[float, float]:
    """Resolve the Y range; a flat range is widened by one unit each side."""
    if domain is None:
        if not values:
            return 0.0, 1.0
        low, high = float(min(values)), float(max(values))
    else:
        low, high = float(domain[0]), float(domain[1])
    if low == high:
        return low - 1, high + 1
    return low, high


def scale_points(
    values: Sequence[float],
    width: float,
    height: float,
    domain: tuple[float, float] | None = None,
) -> list[float]:
    """Map values to a flat [x0, y0, x1, y1, ...] list inside width x height.

    Points are spread evenly left to right; a single point is centred.
    """
    if not values:
        return []
    low, high = value_domain(values, domain)
    span = high - low
    count = len(values)
    points: list[float] = []
    for index, value in enumerate(values):
        x = width / 2 if count == 1 else width * index / (count - 1)
        y = height * (float(value) - low) / span
        points.extend([x, y])
    return points


def axis_ticks(domain: tuple[float, float], count: int = 5) -> list[float]:
    """Evenly spaced tick values from low to high, inclusive."""
    low, high = domain
    if count < 2:
        return [low]
    step = (high - low) / (count - 1)
    return [low + step * i for i in range(count)]


def format_tick(value: float) -> str:
    """Etiqueta compacta: enteros sin decimales, resto con uno."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"
