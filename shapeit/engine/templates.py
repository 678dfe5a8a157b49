"""Default template shapes, opt-in via ``ShapeDetector(atlas=DEFAULT_TEMPLATES)``."""

from __future__ import annotations

import math


def equilateral(n: int) -> list[tuple[float, float]]:
    """Vertices of a regular n-gon on the unit circle, starting at angle 0."""
    step = 2 * math.pi / n
    return [(math.cos(step * i), math.sin(step * i)) for i in range(n)]


DEFAULT_TEMPLATES: dict[str, list[tuple[float, float]]] = {
    "equilateral triangle": equilateral(3),
    "equilateral pentagon": equilateral(5),
    "equilateral hexagon": equilateral(6),
    "golden-ratio triangle": [(0, 0), (1, 0), (0, math.sqrt(3))],
    "silver-ratio triangle": [(0, 0), (1, 0), (0, 1)],
    "rhombus": [(-1, 0), (0, -math.sqrt(3)), (1, 0), (0, math.sqrt(3))],
    "trapezoid": [(0, 1), (-1, 0), (2, 0), (1, 1)],
    "concave quadrilateral": [(0, 1), (-1, -1), (0, 0), (1, -1)],
    "spark": [
        (250, 0), (50, 50), (0, 250), (-50, 50),
        (-250, 0), (-50, -50), (0, -250), (50, -50),
    ],
    "star": [
        (0, -300), (-100, -110), (-300, -70), (-160, 90), (-190, 300),
        (0, 210), (190, 300), (160, 90), (300, -70), (100, -110),
    ],
}
