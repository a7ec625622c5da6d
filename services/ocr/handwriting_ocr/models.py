from pydantic import BaseModel, ConfigDict, Field, model_serializer
from typing import Dict, List, Optional


class Vertex(BaseModel):
    # Vision drops a coordinate entirely when it is 0
    model_config = ConfigDict(frozen=True)

    x: Optional[float] = None
    y: Optional[float] = None

    @model_serializer
    def _present_axes(self) -> Dict[str, float]:
        # echo the vertex the way Vision sent it, without the missing axis
        return {axis: value for axis, value in (("x", self.x), ("y", self.y)) if value is not None}


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float


class TextFragment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    bounds: List[Vertex]
    angle: float
    bounding_box: BoundingBox = Field(alias="boundingBox")
    center: Point


class OcrResult(BaseModel):
    full_text: str
    fragments: List[TextFragment] = Field(default_factory=list)


class AnnotatedImage(BaseModel):
    type: str = "svg_overlay"
    svg: str
    note: str = "Render this SVG on top of the original image"


class OcrResponse(BaseModel):
    typed_text: str
    annotated_image: AnnotatedImage
    bounding_boxes: List[TextFragment]
    detected_lang: Optional[str] = None
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    stack: Optional[str] = None
    success: bool = False
