"""LocalRecognitionEngine (PaddleOCR + OpenCV) and CloudRecognitionEngine (AWS Textract)."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from tenacity import retry, stop_after_attempt, wait_exponential

from content_analysis.engine.base import CodeObservation, RecognitionEngine, TextCandidate, TextObservation
from content_analysis.geometry.quad import GeometryQuad

logger = logging.getLogger(__name__)


def normalize_polygon(points: Any, width: float, height: float) -> GeometryQuad:
    """Turn a pixel polygon ``[tl, tr, br, bl]`` (y down) into a normalized quad (y up)."""
    return GeometryQuad.from_points(
        [(float(x) / width, 1.0 - float(y) / height) for x, y in points]
    )


# ---------------------------------------------------------------------------
# LocalRecognitionEngine — PaddleOCR text + OpenCV QR codes
# ---------------------------------------------------------------------------

class LocalRecognitionEngine(RecognitionEngine):
    """Recognition backed by PaddleOCR and OpenCV (runs 100% locally, no cloud calls).

    Install dependency:
        pip install paddlepaddle paddleocr opencv-python-headless

    Config (via .env):
        RECOGNITION_PROVIDER=paddleocr
        PADDLE_LANG=en      # language code: en | ch | fr | es | etc.
        PADDLE_USE_GPU=false

    PaddleOCR reports geometry per line only, so word quads are interpolated
    along the line.
    """

    def __init__(self, lang: str = "en", use_gpu: bool = False) -> None:
        self._lang = lang
        self._use_gpu = use_gpu
        self._ocr = None   # lazy-init to avoid import cost at startup
        self._qr = None

    def _get_ocr(self):
        if self._ocr is None:
            try:
                from paddleocr import PaddleOCR  # type: ignore[import]
            except ModuleNotFoundError as exc:
                raise RuntimeError(
                    "PaddleOCR is not installed. Run: pip install paddlepaddle paddleocr"
                ) from exc
            self._ocr = PaddleOCR(
                use_angle_cls=True,
                lang=self._lang,
                use_gpu=self._use_gpu,
                show_log=False,
            )
        return self._ocr

    def _get_qr_detector(self):
        if self._qr is None:
            import cv2

            self._qr = cv2.QRCodeDetector()
        return self._qr

    async def detect_codes(self, image: Any) -> list[CodeObservation]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._detect_codes, image)

    async def detect_text(self, image: Any) -> list[TextObservation]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._detect_text, image)

    def _detect_codes(self, image: Any) -> list[CodeObservation]:
        import cv2

        height, width = image.shape[:2]
        bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
        found, payloads, points, _ = self._get_qr_detector().detectAndDecodeMulti(bgr)
        if not found or points is None:
            return []

        observations = [
            CodeObservation(payload=payload or None, quad=normalize_polygon(corners, width, height))
            for payload, corners in zip(payloads, points)
        ]
        logger.info("opencv_qr_complete", extra={"codes": len(observations)})
        return observations

    def _detect_text(self, image: Any) -> list[TextObservation]:
        height, width = image.shape[:2]
        result = self._get_ocr().ocr(image, cls=True)

        observations: list[TextObservation] = []
        if result and result[0]:
            for line in result[0]:
                # Each line: [bounding_box, [text, confidence]]
                box, (text, conf) = line
                quad = normalize_polygon(box, width, height)
                candidate = TextCandidate(text, float(conf), line_quad=quad)
                observations.append(TextObservation(candidates=[candidate], quad=quad))

        logger.info("paddleocr_complete", extra={"lines": len(observations)})
        return observations


# ---------------------------------------------------------------------------
# CloudRecognitionEngine — AWS Textract
# ---------------------------------------------------------------------------

class CloudRecognitionEngine(RecognitionEngine):
    """Text recognition backed by AWS Textract ``DetectDocumentText``.

    Textract does not decode QR codes, so ``detect_codes`` always returns an
    empty list. Word geometry comes from the WORD blocks under each LINE.

    Config (via .env):
        RECOGNITION_PROVIDER=aws_textract
        AWS_REGION=us-east-1
        AWS_ACCESS_KEY_ID=...      (or use IAM role)
        AWS_SECRET_ACCESS_KEY=...

    Install dependency:
        pip install boto3
    """

    def __init__(
        self,
        region: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
    ) -> None:
        self._region = region
        self._access_key = aws_access_key_id
        self._secret_key = aws_secret_access_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                import boto3  # type: ignore[import]
            except ModuleNotFoundError as exc:
                raise RuntimeError(
                    "boto3 is not installed. Run: pip install boto3"
                ) from exc
            kwargs: dict = {"region_name": self._region}
            if self._access_key:
                kwargs["aws_access_key_id"] = self._access_key
                kwargs["aws_secret_access_key"] = self._secret_key
            self._client = boto3.client("textract", **kwargs)
        return self._client

    async def detect_codes(self, image: Any) -> list[CodeObservation]:
        return []

    async def detect_text(self, image: Any) -> list[TextObservation]:
        import io

        from PIL import Image

        buffer = io.BytesIO()
        Image.fromarray(image).save(buffer, format="PNG")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._call_textract, buffer.getvalue())

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10))
    def _call_textract(self, image_bytes: bytes) -> list[TextObservation]:
        client = self._get_client()
        response = client.detect_document_text(Document={"Bytes": image_bytes})
        observations = textract_observations(response.get("Blocks", []))
        logger.info("textract_complete", extra={"lines": len(observations)})
        return observations


def _textract_quad(block: dict) -> GeometryQuad:
    # Textract polygons are already normalized, but with a top-left origin.
    polygon = block["Geometry"]["Polygon"]
    return GeometryQuad.from_points([(p["X"], 1.0 - p["Y"]) for p in polygon])


def textract_observations(blocks: list[dict]) -> list[TextObservation]:
    """Build one TextObservation per LINE block, with word quads from its WORD children."""
    by_id = {b["Id"]: b for b in blocks if "Id" in b}
    observations: list[TextObservation] = []

    for block in blocks:
        if block.get("BlockType") != "LINE":
            continue
        text = block.get("Text", "")
        quad = _textract_quad(block)

        word_quads: dict[tuple[int, int], GeometryQuad] = {}
        cursor = 0
        for rel in block.get("Relationships", []):
            if rel.get("Type") != "CHILD":
                continue
            for child_id in rel.get("Ids", []):
                word = by_id.get(child_id)
                if not word or word.get("BlockType") != "WORD":
                    continue
                start = text.find(word.get("Text", ""), cursor)
                if start < 0:
                    continue
                end = start + len(word["Text"])
                word_quads[(start, end)] = _textract_quad(word)
                cursor = end

        candidate = TextCandidate(
            text,
            float(block.get("Confidence", 0)) / 100.0,
            line_quad=quad,
            word_quads=word_quads,
        )
        observations.append(TextObservation(candidates=[candidate], quad=quad))

    return observations
