"""HTTP entry point: upload an image, get typed text plus an SVG overlay back.

Run locally with::

    uvicorn handwriting_ocr.main:app --port 8080
"""

import logging
from typing import Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, errors
from .config import Settings, configure_logging, get_settings
from .models import ErrorResponse, OcrResponse
from .ocr import build_provider, detect_language, summarize
from .overlay import render

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

CORS_METHODS = "POST, OPTIONS"
CORS_HEADERS = "Content-Type"

app = FastAPI(title="Handwriting OCR Service", version=__version__)


def cors_headers(request: Request, settings: Settings) -> Dict[str, str]:
    allowed = settings.allowed_origins
    origin = request.headers.get("origin")
    if "*" in allowed:
        allow_origin = "*"
    elif origin in allowed:
        allow_origin = origin
    else:
        allow_origin = allowed[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
    }


def error_response(
    request: Request,
    message: str,
    status_code: int,
    stack: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=message, stack=stack).model_dump(exclude_none=True)
    all_headers = cors_headers(request, get_settings())
    if headers:
        all_headers.update(headers)
    return JSONResponse(status_code=status_code, content=body, headers=all_headers)


@app.exception_handler(errors.OcrServiceError)
async def ocr_service_error_handler(request: Request, exc: errors.OcrServiceError):
    stack = None
    if isinstance(exc, errors.InternalError) and not get_settings().is_production:
        stack = exc.stack
    return error_response(request, exc.message, exc.status_code, stack=stack)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 405:
        message = "Method not allowed. Use POST with image file."
    return error_response(request, str(message), exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected request: %s", exc.errors())
    return error_response(request, 'Invalid upload. Send as form-data with key "image"', 400)


@app.options("/")
def preflight(request: Request, settings: Settings = Depends(get_settings)):
    return Response(status_code=200, headers=cors_headers(request, settings))


@app.post("/")
def annotate(
    request: Request,
    image: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
):
    if image is None:
        raise errors.ValidationError('No image provided. Send as form-data with key "image"')

    image_bytes = image.file.read()
    if not image_bytes:
        raise errors.ValidationError("Uploaded image is empty")
    logger.info("Processing image: %s (%s, %d bytes)", image.filename, image.content_type, len(image_bytes))

    provider = build_provider(settings)
    try:
        result = provider.recognize(image_bytes)
        logger.info("OCR complete: %s", summarize(result.fragments))

        annotated = render(result.fragments)
        body = OcrResponse(
            typed_text=result.full_text,
            annotated_image=annotated,
            bounding_boxes=result.fragments,
            detected_lang=detect_language(result.full_text),
        )
    except errors.UpstreamError as e:
        logger.warning("OCR failed for %s: %s", image.filename, e)
        raise
    except errors.OcrServiceError:
        raise
    except Exception as e:
        logger.exception("Failed to annotate %s", image.filename)
        raise errors.InternalError.wrap(e) from e

    return JSONResponse(content=body.model_dump(by_alias=True), headers=cors_headers(request, settings))


@app.get("/health")
def health():
    return {"status": "ok", "service": "handwriting-ocr"}


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
