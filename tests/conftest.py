"""Shared test fixtures."""

from __future__ import annotations

import math

import pytest

from shapeit.engine import ShapeDetector


# Strokes used by the end-to-end detection tests

CIRCLE_CENTER = (150.0, 150.0)
CIRCLE_RADIUS = 50.0

CIRCLE_STROKE = [
    (
        CIRCLE_CENTER[0] + CIRCLE_RADIUS * math.cos(2 * math.pi * k / 12),
        CIRCLE_CENTER[1] + CIRCLE_RADIUS * math.sin(2 * math.pi * k / 12),
    )
    for k in range(12)
]

RECTANGLE_STROKE = [(0.0, 0.0), (100.0, 0.0), (100.0, 60.0), (0.0, 60.0)]

VECTOR_Y = 40.0

VECTOR_STROKE = [
    (0.0, VECTOR_Y),
    (60.0, VECTOR_Y + 1.5),
    (120.0, VECTOR_Y - 1.0),
    (180.0, VECTOR_Y + 2.0),
    (240.0, VECTOR_Y - 1.5),
    (300.0, VECTOR_Y),
]

L_STROKE = [(0.0, 0.0), (0.0, 100.0), (100.0, 100.0)]

TRIANGLE_TEMPLATE = [(0.0, 0.0), (1.0, 0.0), (0.5, math.sqrt(3) / 2)]


def transformed(points, scale=1.0, rotation=0.0, offset=(0.0, 0.0), jitter=None):
    """Scale, rotate (around the origin), translate and jitter a vertex list."""
    cos = math.cos(rotation)
    sin = math.sin(rotation)
    jitter = jitter or [(0.0, 0.0)] * len(points)
    return [
        (
            scale * (cos * x - sin * y) + offset[0] + jx,
            scale * (sin * x + cos * y) + offset[1] + jy,
        )
        for (x, y), (jx, jy) in zip(points, jitter)
    ]


TRIANGLE_CORNERS = transformed(
    TRIANGLE_TEMPLATE,
    scale=160.0,
    rotation=0.4,
    offset=(220.0, 90.0),
    jitter=[(1.0, -0.5), (-0.8, 1.2), (0.6, 0.4)],
)

# Drawn back to the starting corner
TRIANGLE_STROKE = TRIANGLE_CORNERS + [TRIANGLE_CORNERS[0]]


def sorted_points(points, digits=6):
    return sorted((round(x, digits), round(y, digits)) for x, y in points)


@pytest.fixture
def detector() -> ShapeDetector:
    return ShapeDetector()


@pytest.fixture
def triangle_detector() -> ShapeDetector:
    return ShapeDetector(atlas={"equilateral": TRIANGLE_TEMPLATE})
