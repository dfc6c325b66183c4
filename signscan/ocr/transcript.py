"""Rebuild a clean transcript from word-level recognition output.

Low-confidence words are dropped, and a line that loses too many of its
words is dropped as a whole: bursts of misrecognised glyphs would
otherwise survive word filtering as short nonsense lines.
"""

from signscan.utils.config import CleaningConfig
from signscan.utils.logger import get_logger

from .tesseract_engine import RecognitionResult

logger = get_logger(__name__)


def has_meaningful_text(text: str | None, min_chars: int = 2) -> bool:
    """Return whether a transcript holds at least ``min_chars`` visible characters."""
    if not text:
        return False
    return len(text.strip()) >= min_chars


class TranscriptCleaner:
    """Filters a recognition result down to its confident lines.

    Args:
        config: Cleaning thresholds. Defaults to a 45 confidence floor and
            a 40% line-yield threshold.
    """

    def __init__(self, config: CleaningConfig | None = None) -> None:
        self.config = config or CleaningConfig()

    def clean(self, result: RecognitionResult) -> str:
        """Build the cleaned transcript for a recognition result.

        Args:
            result: Recognition output, typically the winning strategy's.

        Returns:
            Newline-joined kept lines, or the engine's flat text verbatim
            when the result has no line structure. May be empty.
        """
        if not result.lines:
            return result.text or ""

        kept_lines: list[str] = []
        dropped = 0

        for line in result.lines:
            if not line:
                continue

            good_words = [
                token.text.strip()
                for token in line
                if token.confidence >= self.config.min_word_confidence
                and token.text.strip()
            ]
            keep_ratio = len(good_words) / len(line)
            if not good_words or keep_ratio < self.config.min_line_keep_ratio:
                dropped += 1
                continue

            kept_lines.append(" ".join(good_words))

        logger.debug(
            "Transcript cleaning kept %d lines, dropped %d", len(kept_lines), dropped
        )
        return "\n".join(kept_lines)
