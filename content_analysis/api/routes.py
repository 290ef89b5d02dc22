from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Path, Query, Request, Response, UploadFile

from content_analysis.cache.keys import MessageId
from content_analysis.core.errors import ImageDecodeError
from content_analysis.detection.models import CodeContent, Detection, TextContent
from content_analysis.geometry.quad import GeometryQuad, Size
from content_analysis.imaging import image_supplier
from content_analysis.recognition.orchestrator import RecognitionOrchestrator
from content_analysis.schemas import DetectionOut, FrameOut, PointOut, QuadOut, RecognizedContentResponse, WordOut

logger = logging.getLogger(__name__)
router = APIRouter()

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def get_orchestrator(request: Request) -> RecognitionOrchestrator:
    return request.app.state.orchestrator


def _message_id(
    namespace: int = Path(ge=_INT32_MIN, le=_INT32_MAX),
    message_id: int = Path(ge=_INT32_MIN, le=_INT32_MAX),
) -> MessageId:
    return MessageId(namespace, message_id)


def _canvas(
    width: float | None = Query(default=None, gt=0),
    height: float | None = Query(default=None, gt=0),
) -> Size | None:
    if width is None and height is None:
        return None
    if width is None or height is None:
        raise HTTPException(status_code=422, detail="width and height must be given together")
    return Size(width, height)


def _quad_out(quad: GeometryQuad, canvas: Size | None) -> QuadOut:
    if canvas is not None:
        quad = quad.convert_to(canvas)
    frame = quad.bounding_frame()
    return QuadOut(
        top_left=PointOut(x=quad.top_left.x, y=quad.top_left.y),
        top_right=PointOut(x=quad.top_right.x, y=quad.top_right.y),
        bottom_left=PointOut(x=quad.bottom_left.x, y=quad.bottom_left.y),
        bottom_right=PointOut(x=quad.bottom_right.x, y=quad.bottom_right.y),
        bounding_frame=FrameOut(x=frame.x, y=frame.y, width=frame.width, height=frame.height),
    )


def _detection_out(detection: Detection, canvas: Size | None) -> DetectionOut:
    content = detection.content
    if isinstance(content, CodeContent):
        return DetectionOut(kind="code", payload=content.payload, quad=_quad_out(detection.quad, canvas))

    if isinstance(content, TextContent):
        words = [
            WordOut(start=w.start, end=w.end, text=w.slice(content.text), quad=_quad_out(w.quad, canvas))
            for w in content.words
        ]
        return DetectionOut(kind="text", text=content.text, words=words, quad=_quad_out(detection.quad, canvas))

    raise TypeError(f"Unsupported detection content: {type(content).__name__}")


def _response(message_id: MessageId, results: list[Detection], canvas: Size | None) -> RecognizedContentResponse:
    return RecognizedContentResponse(
        namespace=message_id.namespace,
        message_id=message_id.id,
        coordinate_space="pixels" if canvas is not None else "normalized",
        results=[_detection_out(d, canvas) for d in results],
    )


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/messages/{namespace}/{message_id}/content", response_model=RecognizedContentResponse)
async def recognize_message_image(
    file: UploadFile = File(...),
    target: MessageId = Depends(_message_id),
    canvas: Size | None = Depends(_canvas),
    orchestrator: RecognitionOrchestrator = Depends(get_orchestrator),
) -> RecognizedContentResponse:
    content_type = file.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=415, detail=f"Unsupported content_type={content_type!r}")

    image_bytes = await file.read()
    try:
        results = await orchestrator.lookup(target, image_supplier(image_bytes))
    except ImageDecodeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info(
        "message_content_recognized",
        extra={"namespace": target.namespace, "message_id": target.id, "count": len(results)},
    )
    return _response(target, results, canvas)


@router.get("/messages/{namespace}/{message_id}/content", response_model=RecognizedContentResponse)
async def get_message_content(
    target: MessageId = Depends(_message_id),
    canvas: Size | None = Depends(_canvas),
    orchestrator: RecognitionOrchestrator = Depends(get_orchestrator),
) -> RecognizedContentResponse:
    results = await orchestrator.cached(target)
    if results is None:
        raise HTTPException(status_code=404, detail="No recognized content cached for this message")
    return _response(target, results, canvas)


@router.delete("/messages/{namespace}/{message_id}/content", status_code=204)
async def clear_message_content(
    target: MessageId = Depends(_message_id),
    orchestrator: RecognitionOrchestrator = Depends(get_orchestrator),
) -> Response:
    await orchestrator.clear(target)
    return Response(status_code=204)
