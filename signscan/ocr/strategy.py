"""Multi-recipe OCR strategy selection.

Every preprocessing recipe is run through the recognition engine
concurrently; the result with the highest average word confidence wins.
When every recipe fails, a single pass over the unprocessed image is used
instead.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from signscan.errors import AllStrategiesFailed, RecognitionError
from signscan.preprocessing.pipeline import ImageTransformer
from signscan.utils.config import RecipeConfig
from signscan.utils.logger import get_logger

from .tesseract_engine import RecognitionEngine, RecognitionResult

logger = get_logger(__name__)

UNPROCESSED = "unprocessed"


@dataclass(frozen=True)
class ScoredResult:
    """A recognition result ranked by its confident-word average."""

    recipe_name: str
    result: RecognitionResult
    score: float
    fallback: bool = False


def score_result(result: RecognitionResult, min_confidence: float = 50.0) -> float:
    """Average confidence over tokens scoring strictly above ``min_confidence``.

    Returns 0.0 when no token qualifies.
    """
    confident = [t.confidence for t in result.tokens if t.confidence > min_confidence]
    if not confident:
        return 0.0
    return sum(confident) / len(confident)


def pick_best(scored: Sequence[ScoredResult]) -> ScoredResult:
    """Return the highest-scoring result; ties go to the earliest entry.

    Raises:
        ValueError: If ``scored`` is empty.
    """
    if not scored:
        raise ValueError("No scored results to choose from")
    return max(scored, key=lambda s: s.score)


class StrategySelector:
    """Runs every recipe through preprocess + recognize and keeps the best.

    Args:
        preprocessor: Produces one derived image per recipe.
        engine: Recognition backend.
        lang: Language hint passed to the engine.
        min_scoring_confidence: Tokens at or below this confidence are
            ignored when scoring.
    """

    def __init__(
        self,
        preprocessor: ImageTransformer,
        engine: RecognitionEngine,
        lang: str = "eng+tam",
        min_scoring_confidence: float = 50.0,
    ) -> None:
        self.preprocessor = preprocessor
        self.engine = engine
        self.lang = lang
        self.min_scoring_confidence = min_scoring_confidence

    async def select_best(
        self, recipes: Sequence[RecipeConfig], source_path: Path
    ) -> ScoredResult:
        """Pick the best recognition result across all recipes.

        Args:
            recipes: Recipes in declaration order.
            source_path: Original image.

        Returns:
            The winning ScoredResult, or the unprocessed fallback.

        Raises:
            AllStrategiesFailed: If every recipe and the fallback failed.
        """
        temp_paths: list[Path] = []
        try:
            outcomes = await asyncio.gather(
                *(
                    asyncio.to_thread(self._run_recipe, recipe, source_path, temp_paths)
                    for recipe in recipes
                ),
                return_exceptions=True,
            )
        finally:
            self._cleanup(temp_paths)

        scored: list[ScoredResult] = []
        errors: list[BaseException] = []
        for recipe, outcome in zip(recipes, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Strategy %s failed: %s", recipe.name, outcome)
                errors.append(outcome)
                continue
            score = score_result(outcome, self.min_scoring_confidence)
            logger.debug("Strategy %s scored %.1f", recipe.name, score)
            scored.append(ScoredResult(recipe.name, outcome, score))

        if scored:
            best = pick_best(scored)
            logger.info(
                "OCR best strategy=%s avg_confidence=%.1f", best.recipe_name, best.score
            )
            return best

        logger.warning("All %d strategies failed, using unprocessed image", len(recipes))
        try:
            result = await asyncio.to_thread(self.engine.recognize, source_path, self.lang)
        except RecognitionError as exc:
            errors.append(exc)
            raise AllStrategiesFailed(
                f"All strategies and the unprocessed fallback failed for {source_path}",
                errors,
            ) from exc
        return ScoredResult(UNPROCESSED, result, 0.0, fallback=True)

    def _run_recipe(
        self, recipe: RecipeConfig, source_path: Path, temp_paths: list[Path]
    ) -> RecognitionResult:
        """Preprocess with one recipe and recognise the derived image."""
        derived = self.preprocessor.apply(recipe, source_path)
        temp_paths.append(derived)
        return self.engine.recognize(derived, self.lang)

    @staticmethod
    def _cleanup(paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove temporary image %s: %s", path, exc)
