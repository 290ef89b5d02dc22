from __future__ import annotations

from content_analysis.core.config import settings
from content_analysis.engine.base import RecognitionEngine
from content_analysis.engine.mock_engine import MockRecognitionEngine


def get_recognition_engine() -> RecognitionEngine:
    """Return the configured recognition engine instance.

    RECOGNITION_PROVIDER options:
        mock         — fixed QR code + text line (dev/test, no deps required)
        paddleocr    — LocalRecognitionEngine (pip install paddlepaddle paddleocr opencv-python-headless)
        aws_textract — CloudRecognitionEngine (pip install boto3 + AWS credentials), text only
    """
    provider = settings.recognition_provider.lower().strip()

    if provider == "mock":
        return MockRecognitionEngine()

    if provider == "paddleocr":
        from content_analysis.engine.engines import LocalRecognitionEngine
        return LocalRecognitionEngine(
            lang=settings.paddle_lang,
            use_gpu=settings.paddle_use_gpu,
        )

    if provider == "aws_textract":
        from content_analysis.engine.engines import CloudRecognitionEngine
        return CloudRecognitionEngine(
            region=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    raise ValueError(f"Unknown RECOGNITION_PROVIDER={settings.recognition_provider!r}")
