"""Tesseract OCR engine wrapper with word- and line-level extraction.

The engine is a pure adapter: it returns the tokens Tesseract produced,
grouped into lines, with their confidence scores, and applies no filtering
or interpretation of its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import pytesseract
from PIL import Image

from signscan.errors import RecognitionError
from signscan.utils.config import OCRConfig
from signscan.utils.logger import get_logger

logger = get_logger(__name__)

# Tesseract's image_to_data level for individual words.
_WORD_LEVEL = 5


@dataclass(frozen=True)
class RecognitionToken:
    """A single word recognised by the engine."""

    text: str
    confidence: float
    line_index: int


@dataclass(frozen=True)
class RecognitionResult:
    """Tokens grouped into lines, plus the engine's flat transcript."""

    lines: tuple[tuple[RecognitionToken, ...], ...]
    text: str
    language: str = ""

    @property
    def tokens(self) -> list[RecognitionToken]:
        """All tokens across every line, in engine order."""
        return [token for line in self.lines for token in line]


class RecognitionEngine(ABC):
    """Interface for text-recognition backends."""

    @abstractmethod
    def recognize(self, image_path: Path, lang: str) -> RecognitionResult:
        """Recognise text in an image file.

        Raises:
            RecognitionError: If the backend cannot be invoked.
        """
        raise NotImplementedError


class TesseractEngine(RecognitionEngine):
    """Wrapper around Tesseract OCR for signboard text extraction.

    Args:
        config: OCR configuration; supplies the executable path and the
            page segmentation / engine mode flags.
    """

    def __init__(self, config: OCRConfig | None = None) -> None:
        self.config = config or OCRConfig()
        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd

    def recognize(self, image_path: Path, lang: str | None = None) -> RecognitionResult:
        """Extract line-grouped words and the flat transcript from an image.

        Args:
            image_path: Image file to read.
            lang: Tesseract language string. Defaults to the configured
                language set.

        Returns:
            RecognitionResult with one tuple of tokens per detected line.

        Raises:
            RecognitionError: If the image cannot be opened or Tesseract fails.
        """
        lang = lang or self.config.lang
        flags = self.config.tesseract_config

        try:
            with Image.open(image_path) as pil_image:
                text = pytesseract.image_to_string(pil_image, lang=lang, config=flags)
                data = pytesseract.image_to_data(
                    pil_image,
                    lang=lang,
                    config=flags,
                    output_type=pytesseract.Output.DICT,
                )
        except (pytesseract.TesseractError, OSError, RuntimeError) as exc:
            raise RecognitionError(f"Tesseract failed on {image_path}: {exc}") from exc

        lines = self._group_lines(data)
        logger.info(
            "OCR extracted %d words on %d lines from %s",
            sum(len(line) for line in lines),
            len(lines),
            Path(image_path).name,
        )
        return RecognitionResult(lines=lines, text=text, language=lang)

    @staticmethod
    def _group_lines(data: dict) -> tuple[tuple[RecognitionToken, ...], ...]:
        """Group word rows of ``image_to_data`` output by their line key.

        Args:
            data: Dict output of ``pytesseract.image_to_data``.

        Returns:
            Lines in engine order, each a tuple of tokens.
        """
        count = len(data["text"])
        levels = data.get("level") or [_WORD_LEVEL] * count
        pages = data.get("page_num") or [1] * count
        paragraphs = data.get("par_num") or [1] * count
        grouped: dict[tuple[int, int, int, int], list[tuple[str, float]]] = {}

        for i in range(count):
            conf = float(data["conf"][i])
            if int(levels[i]) != _WORD_LEVEL or conf < 0:
                continue
            key = (
                int(pages[i]),
                int(data["block_num"][i]),
                int(paragraphs[i]),
                int(data["line_num"][i]),
            )
            grouped.setdefault(key, []).append((str(data["text"][i]), conf))

        return tuple(
            tuple(
                RecognitionToken(text=word, confidence=conf, line_index=index)
                for word, conf in words
            )
            for index, words in enumerate(grouped.values())
        )
