"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from signscan.utils.config import (
    AppConfig,
    CleaningConfig,
    OCRConfig,
    ParsingConfig,
    PreprocessingConfig,
    RecipeConfig,
    ScoringConfig,
    default_recipes,
    load_config,
)


class TestPreprocessingConfig:
    """Tests for the recipe defaults."""

    def test_three_default_recipes(self) -> None:
        cfg = PreprocessingConfig()
        assert [r.name for r in cfg.recipes] == ["high-contrast", "clean-bw", "gentle"]
        assert cfg.temp_dir is None

    def test_recipes_start_with_resize_and_grayscale(self) -> None:
        for recipe in default_recipes():
            assert recipe.steps[0].op == "resize"
            assert recipe.steps[0].params == {"width": 2400}
            assert recipe.steps[1].op == "grayscale"

    def test_clean_bw_thresholds_last(self) -> None:
        clean_bw = default_recipes()[1]
        assert clean_bw.steps[-1].op == "threshold"
        assert clean_bw.steps[-1].params == {"level": 160}

    def test_recipe_is_frozen(self) -> None:
        recipe = default_recipes()[0]
        with pytest.raises(ValidationError):
            recipe.name = "other"


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.lang == "eng+tam"
        assert cfg.psm == 6
        assert cfg.oem == 1
        assert cfg.tesseract_cmd is None

    def test_tesseract_config_flags(self) -> None:
        assert OCRConfig().tesseract_config == (
            "--psm 6 --oem 1 -c preserve_interword_spaces=1"
        )

    def test_tesseract_config_without_spacing(self) -> None:
        cfg = OCRConfig(psm=4, oem=3, preserve_interword_spaces=False)
        assert cfg.tesseract_config == "--psm 4 --oem 3"


class TestThresholdConfigs:
    """Tests for scoring, cleaning and parsing defaults."""

    def test_scoring_defaults(self) -> None:
        assert ScoringConfig().min_scoring_confidence == 50.0

    def test_cleaning_defaults(self) -> None:
        cfg = CleaningConfig()
        assert cfg.min_word_confidence == 45.0
        assert cfg.min_line_keep_ratio == 0.4
        assert cfg.min_text_length == 2

    def test_keep_ratio_bounds(self) -> None:
        with pytest.raises(ValidationError):
            CleaningConfig(min_line_keep_ratio=1.5)

    def test_parsing_defaults(self) -> None:
        cfg = ParsingConfig()
        assert "salai" in cfg.address_keywords
        assert "nagar" in cfg.address_keywords
        assert cfg.address_separator == " | "
        assert cfg.list_separator == ", "
        assert (cfg.phone_min_digits, cfg.phone_max_digits) == (7, 15)


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.cleaning, CleaningConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            cleaning=CleaningConfig(min_word_confidence=60.0),
            log_level="DEBUG",
        )
        assert cfg.cleaning.min_word_confidence == 60.0
        assert cfg.log_level == "DEBUG"

    def test_frozen(self) -> None:
        cfg = AppConfig()
        with pytest.raises(ValidationError):
            cfg.log_level = "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_shipped_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.lang == "eng+tam"
        assert [r.name for r in cfg.preprocessing.recipes] == [
            r.name for r in default_recipes()
        ]

    def test_shipped_config_matches_defaults(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert cfg.preprocessing.recipes == tuple(default_recipes())
        assert cfg.cleaning == CleaningConfig()

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "preprocessing": {
                "recipes": [
                    {"name": "only", "steps": [{"op": "grayscale"}]},
                ]
            },
            "ocr": {"lang": "eng", "psm": 4},
            "cleaning": {"min_word_confidence": 60},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert len(cfg.preprocessing.recipes) == 1
        assert isinstance(cfg.preprocessing.recipes[0], RecipeConfig)
        assert cfg.preprocessing.recipes[0].steps[0].params == {}
        assert cfg.ocr.lang == "eng"
        assert cfg.ocr.psm == 4
        assert cfg.cleaning.min_word_confidence == 60.0
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("cleaning:\n  min_line_keep_ratio: 3\n")
        with pytest.raises(ValidationError):
            load_config(config_file)
