"""Quadrilateral geometry for OCR fragments.

All coordinates are read through :func:`coordinate`, so a vertex that is
missing an axis (Google Vision omits zero values) counts as 0 everywhere.
"""

import math
from typing import Optional, Sequence

from .models import BoundingBox, Point, TextFragment, Vertex

ORIGIN = Vertex(x=0, y=0)


def coordinate(vertex: Optional[Vertex], axis: str) -> float:
    if vertex is None:
        return 0.0
    value = getattr(vertex, axis)
    return float(value) if value is not None else 0.0


def top_edge_angle(vertices: Sequence[Vertex]) -> float:
    """Tilt of the first edge (v1 -> v2) in degrees, in (-180, 180].

    The angle describes this fragment only. A fragment that is upright on
    a page of sideways text still reports roughly 0.
    """
    v1 = vertices[0] if len(vertices) > 0 else ORIGIN
    v2 = vertices[1] if len(vertices) > 1 else ORIGIN
    angle = math.degrees(
        math.atan2(
            coordinate(v2, "y") - coordinate(v1, "y"),
            coordinate(v2, "x") - coordinate(v1, "x"),
        )
    )
    if angle == -180.0:
        angle = 180.0
    return angle


def bounding_box(vertices: Sequence[Vertex]) -> BoundingBox:
    xs = [coordinate(v, "x") for v in vertices] or [0.0]
    ys = [coordinate(v, "y") for v in vertices] or [0.0]
    return BoundingBox(
        x=min(xs),
        y=min(ys),
        width=max(xs) - min(xs),
        height=max(ys) - min(ys),
    )


def centroid(vertices: Sequence[Vertex]) -> Point:
    if not vertices:
        return Point(x=0.0, y=0.0)
    count = len(vertices)
    return Point(
        x=sum(coordinate(v, "x") for v in vertices) / count,
        y=sum(coordinate(v, "y") for v in vertices) / count,
    )


def build_fragment(text: str, vertices: Sequence[Vertex]) -> TextFragment:
    bounds = list(vertices)
    return TextFragment(
        text=text,
        bounds=bounds,
        angle=top_edge_angle(bounds),
        bounding_box=bounding_box(bounds),
        center=centroid(bounds),
    )
