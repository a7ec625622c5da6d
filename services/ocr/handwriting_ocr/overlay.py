"""SVG overlay that re-draws recognized text on top of the source image.

Layers are emitted in paint order: blurred backgrounds, borders, white text
halos, then the black text itself. Each layer is emitted for every fragment
before the next layer starts.
"""

from typing import Iterable, List, Sequence
from xml.sax.saxutils import escape

from .geometry import coordinate
from .models import AnnotatedImage, TextFragment, Vertex

MIN_FONT_SIZE = 14.0
MAX_FONT_SIZE = 100.0
FONT_SCALE = 0.8
FONT_FAMILY = "Arial, Helvetica, sans-serif"

BLUR_FILTER = (
    '<defs><filter id="blur"><feGaussianBlur in="SourceGraphic" stdDeviation="2"/></filter></defs>'
)

_ENTITIES = {"'": "&apos;", '"': "&quot;"}


def escape_markup(text: str) -> str:
    return escape(text, _ENTITIES)


def fmt(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def is_vertical(angle: float) -> bool:
    """True when the text runs closer to a quarter turn than to upright."""
    a = abs(angle)
    return 45 < a < 135 or 225 < a < 315


def font_size(fragment: TextFragment) -> float:
    box = fragment.bounding_box
    extent = box.width if is_vertical(fragment.angle) else box.height
    return max(MIN_FONT_SIZE, min(extent * FONT_SCALE, MAX_FONT_SIZE))


def polygon_points(bounds: Sequence[Vertex]) -> str:
    return " ".join(f"{fmt(coordinate(v, 'x'))},{fmt(coordinate(v, 'y'))}" for v in bounds)


def background_patch(fragment: TextFragment) -> str:
    return (
        f'<polygon points="{polygon_points(fragment.bounds)}" fill="white" '
        f'fill-opacity="0.5" filter="url(#blur)"/>'
    )


def border(fragment: TextFragment) -> str:
    return (
        f'<polygon points="{polygon_points(fragment.bounds)}" fill="none" '
        f'stroke="rgba(100, 100, 100, 0.3)" stroke-width="1"/>'
    )


def _text(fragment: TextFragment, paint: str) -> str:
    size = font_size(fragment)
    cx, cy = fragment.center.x, fragment.center.y
    transform = f"rotate({fmt(fragment.angle)}, {fmt(cx)}, {fmt(cy)})"
    return (
        f'<text x="{fmt(cx)}" y="{fmt(cy + size / 3)}" font-family="{FONT_FAMILY}" '
        f'font-size="{fmt(size)}" {paint} text-anchor="middle" '
        f'transform="{transform}">{escape_markup(fragment.text)}</text>'
    )


def text_halo(fragment: TextFragment) -> str:
    return _text(fragment, 'fill="none" stroke="white" stroke-width="4" stroke-linejoin="round"')


def text_fill(fragment: TextFragment) -> str:
    return _text(fragment, 'fill="black"')


def _layer(fragments: Iterable[TextFragment], draw) -> str:
    return "\n".join(draw(fragment) for fragment in fragments)


def render(fragments: List[TextFragment]) -> AnnotatedImage:
    layers = [
        _layer(fragments, background_patch),
        _layer(fragments, border),
        _layer(fragments, text_halo),
        _layer(fragments, text_fill),
    ]
    return AnnotatedImage(svg=BLUR_FILTER + "\n".join(layers))
