"""Shared test fixtures for the signboard OCR test suite."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from signscan.errors import PreprocessError, RecognitionError
from signscan.ocr.tesseract_engine import (
    RecognitionEngine,
    RecognitionResult,
    RecognitionToken,
)
from signscan.preprocessing.pipeline import ImageTransformer
from signscan.utils.config import RecipeConfig, RecipeStep


def make_result(
    lines: list[list[tuple[str, float]]], text: str | None = None
) -> RecognitionResult:
    """Build a RecognitionResult from ``[[(word, confidence), ...], ...]``."""
    built = tuple(
        tuple(RecognitionToken(word, conf, index) for word, conf in line)
        for index, line in enumerate(lines)
    )
    if text is None:
        text = "\n".join(" ".join(word for word, _ in line) for line in lines)
    return RecognitionResult(lines=built, text=text, language="eng+tam")


def make_recipe(name: str) -> RecipeConfig:
    """Build a minimal one-step recipe."""
    return RecipeConfig(name=name, steps=(RecipeStep(op="grayscale"),))


class FakePreprocessor(ImageTransformer):
    """Writes an empty marker file per recipe; fails for configured names."""

    def __init__(self, tmp_dir: Path, failing: set[str] | None = None) -> None:
        self.tmp_dir = tmp_dir
        self.failing = failing or set()
        self.created: list[Path] = []

    def apply(self, recipe: RecipeConfig, source_path: Path) -> Path:
        if recipe.name in self.failing:
            raise PreprocessError(f"{recipe.name} exploded")
        path = self.tmp_dir / f"derived_{recipe.name}.png"
        path.write_bytes(b"fake")
        self.created.append(path)
        return path


class FakeEngine(RecognitionEngine):
    """Returns fixed results keyed by the derived image's file name."""

    def __init__(
        self,
        results: dict[str, RecognitionResult],
        failing: set[str] | None = None,
    ) -> None:
        self.results = results
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    def recognize(self, image_path: Path, lang: str) -> RecognitionResult:
        name = Path(image_path).name
        self.calls.append((name, lang))
        if name in self.failing:
            raise RecognitionError(f"engine failed on {name}")
        return self.results[name]


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def sample_image_file(tmp_path: Path, sample_color_image: np.ndarray) -> Path:
    """Write the synthetic BGR image to a PNG file."""
    path = tmp_path / "sign.png"
    cv2.imwrite(str(path), sample_color_image)
    return path


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
