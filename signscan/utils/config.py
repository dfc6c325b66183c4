"""Configuration management for the signboard OCR system.

Loads and validates YAML configuration with sensible defaults for the
preprocessing recipes, the Tesseract invocation, result scoring,
transcript cleaning and field parsing.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_FROZEN = ConfigDict(frozen=True)


class RecipeStep(BaseModel):
    """A single image operation and its parameters."""

    model_config = _FROZEN

    op: str
    params: dict[str, Any] = Field(default_factory=dict)


class RecipeConfig(BaseModel):
    """A named, ordered sequence of image operations."""

    model_config = _FROZEN

    name: str
    steps: tuple[RecipeStep, ...]


def _step(op: str, **params: Any) -> RecipeStep:
    return RecipeStep(op=op, params=params)


def default_recipes() -> list[RecipeConfig]:
    """Return the three stock recipes, one per image quality profile.

    ``high-contrast`` suits dark backgrounds and chalkboards, ``clean-bw``
    printed menus and receipts on white paper, ``gentle`` handwriting and
    low-contrast photos.
    """
    return [
        RecipeConfig(
            name="high-contrast",
            steps=(
                _step("resize", width=2400),
                _step("grayscale"),
                _step("normalize"),
                _step("clahe", tile_size=8, clip_limit=4.0),
                _step("sharpen", sigma=1.8, amount=0.5),
            ),
        ),
        RecipeConfig(
            name="clean-bw",
            steps=(
                _step("resize", width=2400),
                _step("grayscale"),
                _step("normalize"),
                _step("linear", alpha=1.3, beta=-30),
                _step("sharpen", sigma=1.2),
                _step("median", size=3),
                _step("threshold", level=160),
            ),
        ),
        RecipeConfig(
            name="gentle",
            steps=(
                _step("resize", width=2400),
                _step("grayscale"),
                _step("normalize"),
                _step("sharpen", sigma=0.8),
            ),
        ),
    ]


DEFAULT_ADDRESS_KEYWORDS: tuple[str, ...] = (
    "street",
    "st",
    "road",
    "rd",
    "avenue",
    "ave",
    "lane",
    "nagar",
    "salai",
    "marg",
    "chowk",
    "block",
    "sector",
    "plot",
    "no",
    "floor",
    "building",
    "bldg",
    "colony",
    "layout",
    "cross",
    "main",
    "bypass",
    "highway",
    "district",
    "taluk",
    "village",
)


class PreprocessingConfig(BaseModel):
    """Configuration for the image preprocessing recipes."""

    model_config = _FROZEN

    recipes: tuple[RecipeConfig, ...] = Field(
        default_factory=lambda: tuple(default_recipes())
    )
    temp_dir: str | None = None


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    model_config = _FROZEN

    tesseract_cmd: str | None = None
    lang: str = "eng+tam"
    psm: int = 6
    oem: int = 1
    preserve_interword_spaces: bool = True

    @property
    def tesseract_config(self) -> str:
        """Build the Tesseract command-line flag string."""
        flags = f"--psm {self.psm} --oem {self.oem}"
        if self.preserve_interword_spaces:
            flags += " -c preserve_interword_spaces=1"
        return flags


class ScoringConfig(BaseModel):
    """Configuration for ranking recognition results."""

    model_config = _FROZEN

    min_scoring_confidence: float = 50.0


class CleaningConfig(BaseModel):
    """Configuration for transcript cleaning."""

    model_config = _FROZEN

    min_word_confidence: float = 45.0
    min_line_keep_ratio: float = Field(default=0.4, ge=0.0, le=1.0)
    min_text_length: int = 2


class ParsingConfig(BaseModel):
    """Configuration for structured field parsing."""

    model_config = _FROZEN

    address_keywords: tuple[str, ...] = DEFAULT_ADDRESS_KEYWORDS
    address_separator: str = " | "
    list_separator: str = ", "
    phone_min_digits: int = 7
    phone_max_digits: int = 15


class AppConfig(BaseModel):
    """Top-level application configuration."""

    model_config = _FROZEN

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
