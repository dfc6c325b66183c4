"""Recipe-driven image preprocessing for signboard OCR.

Applies a named recipe of operations to a source image and writes the
derived image to a private temporary file for the recognition engine.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import cv2
import numpy as np

from signscan.errors import PreprocessError
from signscan.utils.config import RecipeConfig
from signscan.utils.logger import get_logger

from .operations import apply_operation

logger = get_logger(__name__)


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Sharpness score (higher means sharper).
    """
    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if len(image.shape) == 3 else image
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of pixel intensities.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Contrast score (higher means more contrast).
    """
    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if len(image.shape) == 3 else image
    return float(gray.std())


class ImageTransformer(ABC):
    """Interface for turning a source image into a recipe-derived image file."""

    @abstractmethod
    def apply(self, recipe: RecipeConfig, source_path: Path) -> Path:
        """Write the derived image and return its path.

        The caller owns the returned file and must delete it.
        """
        raise NotImplementedError


class ImagePreprocessor(ImageTransformer):
    """OpenCV implementation of the recipe preprocessor.

    Args:
        temp_dir: Directory for derived images. Defaults to the system
            temporary directory.
    """

    def __init__(self, temp_dir: str | Path | None = None) -> None:
        self.temp_dir = str(temp_dir) if temp_dir is not None else None

    def transform(self, recipe: RecipeConfig, image: np.ndarray) -> np.ndarray:
        """Run every step of a recipe against an in-memory image.

        Args:
            recipe: Recipe to apply.
            image: Decoded source image.

        Returns:
            The transformed image.

        Raises:
            PreprocessError: If a step is unknown or rejects its parameters.
        """
        result = image
        for step in recipe.steps:
            try:
                result = apply_operation(result, step.op, step.params)
            except (ValueError, cv2.error) as exc:
                raise PreprocessError(
                    f"Recipe {recipe.name!r} failed at step {step.op!r}: {exc}"
                ) from exc
        return result

    def apply(self, recipe: RecipeConfig, source_path: Path) -> Path:
        """Decode, transform and write a recipe-derived image.

        Args:
            recipe: Recipe to apply.
            source_path: Readable raster image.

        Returns:
            Path of the derived PNG.

        Raises:
            PreprocessError: If decoding, a step, or the write fails.
        """
        image = cv2.imread(str(source_path), cv2.IMREAD_COLOR)
        if image is None:
            raise PreprocessError(f"Could not decode image: {source_path}")

        result = self.transform(recipe, image)

        try:
            fd, name = tempfile.mkstemp(
                prefix=f"signscan_{recipe.name}_", suffix=".png", dir=self.temp_dir
            )
        except OSError as exc:
            raise PreprocessError(f"Cannot create temporary image: {exc}") from exc
        os.close(fd)
        output_path = Path(name)

        try:
            written = cv2.imwrite(str(output_path), result)
        except cv2.error as exc:
            output_path.unlink(missing_ok=True)
            raise PreprocessError(f"Could not write {output_path}: {exc}") from exc
        if not written:
            output_path.unlink(missing_ok=True)
            raise PreprocessError(f"Could not write {output_path}")

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Recipe %s: sharpness %.1f->%.1f, contrast %.1f->%.1f",
                recipe.name,
                calculate_sharpness(image),
                calculate_sharpness(result),
                calculate_contrast(image),
                calculate_contrast(result),
            )
        return output_path
