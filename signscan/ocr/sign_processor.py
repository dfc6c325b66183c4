"""Unified signboard processing pipeline.

Combines multi-recipe preprocessing, OCR strategy selection, transcript
cleaning and field parsing into a single call that turns one image into
one structured result.
"""

import asyncio
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from signscan.errors import AllStrategiesFailed
from signscan.extraction.field_parser import FieldParser
from signscan.preprocessing.pipeline import ImagePreprocessor, ImageTransformer
from signscan.utils.config import AppConfig
from signscan.utils.logger import get_logger

from .strategy import StrategySelector
from .tesseract_engine import RecognitionEngine, TesseractEngine
from .transcript import TranscriptCleaner, has_meaningful_text

logger = get_logger(__name__)

_LOG_PREVIEW_CHARS = 400


@dataclass
class SignTextResult:
    """Structured text extracted from one image."""

    raw_transcript: str | None = None
    cleaned_transcript: str | None = None
    full_text: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    url: str | None = None
    other_text: str | None = None
    has_text: bool = False
    strategy: str | None = None
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> "SignTextResult":
        """The result returned when no text could be extracted."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SignProcessor:
    """End-to-end signboard OCR pipeline.

    Args:
        config: Application configuration object.
        preprocessor: Image transformer; defaults to the OpenCV preprocessor.
        engine: Recognition engine; defaults to Tesseract.
    """

    def __init__(
        self,
        config: AppConfig,
        preprocessor: ImageTransformer | None = None,
        engine: RecognitionEngine | None = None,
    ) -> None:
        self.config = config
        self.preprocessor = preprocessor or ImagePreprocessor(
            config.preprocessing.temp_dir
        )
        self.engine = engine or TesseractEngine(config.ocr)
        self.selector = StrategySelector(
            self.preprocessor,
            self.engine,
            lang=config.ocr.lang,
            min_scoring_confidence=config.scoring.min_scoring_confidence,
        )
        self.cleaner = TranscriptCleaner(config.cleaning)
        self.parser = FieldParser(config.parsing)

    async def extract(self, image_path: str | Path) -> SignTextResult:
        """Extract structured text from an image.

        Never raises for a missing image or a failed recognition; both
        produce ``SignTextResult.empty()``.

        Args:
            image_path: Path to the photograph.

        Returns:
            Structured text fields, or the empty result.
        """
        path = Path(image_path)
        if not path.is_file():
            logger.warning("OCR: image not found: %s", path)
            return SignTextResult.empty()

        logger.info("Processing image: %s", path.name)
        try:
            best = await self.selector.select_best(
                self.config.preprocessing.recipes, path
            )
        except AllStrategiesFailed as exc:
            logger.warning("OCR failed for %s: %s", path.name, exc)
            return SignTextResult.empty()

        if best.fallback:
            # Best-effort pass over the raw photo: no word-confidence filter.
            cleaned = (best.result.text or "").strip()
        else:
            cleaned = self.cleaner.clean(best.result)
        if not has_meaningful_text(cleaned, self.config.cleaning.min_text_length):
            logger.info("OCR: no confident text detected in %s", path.name)
            return SignTextResult.empty()

        logger.info(
            "OCR cleaned text (%d chars):\n%s",
            len(cleaned),
            cleaned[:_LOG_PREVIEW_CHARS],
        )
        fields = self.parser.parse(cleaned)

        return SignTextResult(
            raw_transcript=best.result.text or None,
            cleaned_transcript=cleaned,
            full_text=fields.full_text,
            address=fields.address,
            phone=fields.phone,
            email=fields.email,
            url=fields.url,
            other_text=fields.other_text,
            has_text=True,
            strategy=best.recipe_name,
            confidence=round(best.score, 2),
        )

    def extract_sync(self, image_path: str | Path) -> SignTextResult:
        """Blocking wrapper around :meth:`extract` for synchronous callers."""
        return asyncio.run(self.extract(image_path))


def extract_structured_text(
    image_path: str | Path, config: AppConfig | None = None
) -> SignTextResult:
    """Run the full pipeline on one image with the given or default config."""
    return SignProcessor(config or AppConfig()).extract_sync(image_path)
