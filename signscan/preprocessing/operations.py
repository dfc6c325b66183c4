"""Pixel-level image operations used by the preprocessing recipes.

Each operation takes an image as a numpy array plus its recipe parameters
and returns a new image. Invalid parameters raise ``ValueError``.
"""

from collections.abc import Callable
from typing import Any

import cv2
import numpy as np

from signscan.utils.logger import get_logger

logger = get_logger(__name__)


def _to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to grayscale if it has color channels.

    Args:
        image: Input image (BGR, BGRA or grayscale).

    Returns:
        Grayscale image.
    """
    if len(image.shape) == 3:
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def resize(image: np.ndarray, width: int, allow_enlarge: bool = True) -> np.ndarray:
    """Scale an image to a target width, keeping the aspect ratio.

    Args:
        image: Input image.
        width: Target width in pixels.
        allow_enlarge: Whether images narrower than ``width`` are upscaled.

    Returns:
        Resized image.
    """
    if width <= 0:
        raise ValueError(f"Resize width must be positive, got {width}")

    h, w = image.shape[:2]
    if w == width or (w < width and not allow_enlarge):
        return image

    height = max(1, round(h * width / w))
    interpolation = cv2.INTER_CUBIC if width > w else cv2.INTER_AREA
    result = cv2.resize(image, (width, height), interpolation=interpolation)
    logger.debug("Resized %dx%d -> %dx%d", w, h, width, height)
    return result


def grayscale(image: np.ndarray) -> np.ndarray:
    """Drop color channels."""
    return _to_gray(image)


def normalize(image: np.ndarray) -> np.ndarray:
    """Stretch intensities to the full 0-255 range."""
    return cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX)


def clahe(image: np.ndarray, tile_size: int = 8, clip_limit: float = 2.0) -> np.ndarray:
    """Enhance local contrast using CLAHE.

    Args:
        image: Input image (BGR or grayscale).
        tile_size: Size of the grid for histogram equalization.
        clip_limit: Threshold for contrast limiting.

    Returns:
        Contrast-enhanced grayscale image.
    """
    if tile_size <= 0 or clip_limit <= 0:
        raise ValueError(
            f"CLAHE needs positive tile_size and clip_limit, got {tile_size}, {clip_limit}"
        )
    gray = _to_gray(image)
    equalizer = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    result = equalizer.apply(gray)
    logger.debug("Applied CLAHE (clip=%.1f, tile=%d)", clip_limit, tile_size)
    return result


def linear(image: np.ndarray, alpha: float = 1.0, beta: float = 0.0) -> np.ndarray:
    """Apply ``alpha * pixel + beta``, saturating to 0-255."""
    result = image.astype(np.float32) * alpha + beta
    return np.clip(np.rint(result), 0, 255).astype(np.uint8)


def sharpen(image: np.ndarray, sigma: float = 1.0, amount: float = 1.0) -> np.ndarray:
    """Sharpen with an unsharp mask.

    Args:
        image: Input image.
        sigma: Standard deviation of the Gaussian used for the mask.
        amount: Weight of the detail layer added back to the image.

    Returns:
        Sharpened image.
    """
    if sigma <= 0:
        raise ValueError(f"Sharpen sigma must be positive, got {sigma}")
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    result = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)
    logger.debug("Applied unsharp mask (sigma=%.1f, amount=%.1f)", sigma, amount)
    return result


def median(image: np.ndarray, size: int = 3) -> np.ndarray:
    """Apply a median filter to remove salt-and-pepper noise.

    Args:
        image: Input image.
        size: Aperture size; must be odd and greater than one.

    Returns:
        Filtered image.
    """
    if size < 3 or size % 2 == 0:
        raise ValueError(f"Median size must be an odd number >= 3, got {size}")
    return cv2.medianBlur(image, size)


def threshold(image: np.ndarray, level: int = 128) -> np.ndarray:
    """Binarize at a fixed intensity level.

    Args:
        image: Input image (BGR or grayscale).
        level: Pixels above this value become white, the rest black.

    Returns:
        Binary image with pixel values 0 or 255.
    """
    if not 0 <= level <= 255:
        raise ValueError(f"Threshold level must be within 0-255, got {level}")
    gray = _to_gray(image)
    _, binary = cv2.threshold(gray, level, 255, cv2.THRESH_BINARY)
    logger.debug("Applied threshold at %d", level)
    return binary


OPERATIONS: dict[str, Callable[..., np.ndarray]] = {
    "resize": resize,
    "grayscale": grayscale,
    "normalize": normalize,
    "clahe": clahe,
    "linear": linear,
    "sharpen": sharpen,
    "median": median,
    "threshold": threshold,
}


def apply_operation(image: np.ndarray, op: str, params: dict[str, Any]) -> np.ndarray:
    """Run a named operation with keyword parameters.

    Raises:
        ValueError: If the operation is unknown or its parameters are invalid.
    """
    func = OPERATIONS.get(op)
    if func is None:
        raise ValueError(f"Unsupported image operation: {op}")
    try:
        return func(image, **params)
    except TypeError as exc:
        raise ValueError(f"Invalid parameters for {op}: {params}") from exc
