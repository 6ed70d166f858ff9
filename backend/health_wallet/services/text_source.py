"""
Text source adapters wrapping the OCR engines.

Supports:
- Tesseract (local, via pytesseract)
- AWS Textract (cloud, via boto3)

Engine calls are blocking, so they run in a worker thread and are awaited
with a bounded timeout. Every engine failure surfaces as ExtractionUnavailable.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
import pytesseract
from PIL import Image, UnidentifiedImageError

from health_wallet.config import Settings
from health_wallet.exceptions import ExtractionUnavailable

logger = logging.getLogger(__name__)


class TextSource(ABC):
    """Turns a stored document into plain recognized text."""

    provider: str = "unknown"

    def __init__(self, timeout_seconds: float = 30.0):
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def _recognize(self, path: Path) -> str:
        """Blocking engine call."""

    async def recognize_text(self, path: Path) -> str:
        start = time.time()
        logger.info("OCR (%s) started for %s", self.provider, path.name)
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._recognize, path),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("OCR (%s) timed out after %.1fs for %s", self.provider, self.timeout_seconds, path.name)
            raise ExtractionUnavailable(
                f"OCR timed out after {self.timeout_seconds:g}s",
                {"provider": self.provider},
            )
        except ExtractionUnavailable:
            raise
        except Exception as e:
            logger.error("OCR (%s) failed for %s: %s", self.provider, path.name, e)
            raise ExtractionUnavailable(f"OCR failed: {e}", {"provider": self.provider}) from e

        elapsed = int((time.time() - start) * 1000)
        logger.info("OCR (%s) finished for %s in %dms (%d chars)", self.provider, path.name, elapsed, len(text or ""))
        return text or ""


class TesseractTextSource(TextSource):
    """Tesseract OCR engine (local, open-source)."""

    provider = "tesseract"

    def __init__(self, language: str = "eng", tesseract_cmd: Optional[str] = None, timeout_seconds: float = 30.0):
        super().__init__(timeout_seconds)
        self.language = language
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def _recognize(self, path: Path) -> str:
        try:
            with Image.open(path) as image:
                # Engine-side timeout stops the tesseract subprocess itself
                return pytesseract.image_to_string(image, lang=self.language, timeout=self.timeout_seconds)
        except UnidentifiedImageError as e:
            raise ExtractionUnavailable("Document is not a readable image", {"provider": self.provider}) from e


class TextractTextSource(TextSource):
    """AWS Textract engine (cloud)."""

    provider = "textract"

    def __init__(self, region: str = "us-east-1", aws_access_key_id: str = "",
                 aws_secret_access_key: str = "", timeout_seconds: float = 30.0):
        super().__init__(timeout_seconds)
        self.region = region
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "textract",
                region_name=self.region,
                aws_access_key_id=self.aws_access_key_id or None,
                aws_secret_access_key=self.aws_secret_access_key or None,
                config=BotoConfig(
                    connect_timeout=self.timeout_seconds,
                    read_timeout=self.timeout_seconds,
                    retries={"max_attempts": 1},
                ),
            )
        return self._client

    def _recognize(self, path: Path) -> str:
        response = self.client.detect_document_text(Document={"Bytes": path.read_bytes()})
        lines = [
            block["Text"]
            for block in response.get("Blocks", [])
            if block.get("BlockType") == "LINE"
        ]
        return "\n".join(lines)


def build_text_source(settings: Settings) -> TextSource:
    provider = settings.ocr_provider.lower()
    if provider == "tesseract":
        return TesseractTextSource(
            language=settings.ocr_language,
            tesseract_cmd=settings.tesseract_cmd,
            timeout_seconds=settings.ocr_timeout_seconds,
        )
    if provider == "textract":
        return TextractTextSource(
            region=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            timeout_seconds=settings.ocr_timeout_seconds,
        )
    raise ValueError(f"Unknown OCR provider: {settings.ocr_provider}")
