from __future__ import annotations

import pytest

from agmarknet.crawler import config
from agmarknet.crawler.config_validation import validate_runtime_config


def test_defaults_are_valid() -> None:
    validate_runtime_config("tests")
    validate_runtime_config(
        "tests", regions=config.REGIONS, years=config.YEARS, months=config.MONTHS
    )


def test_fixed_lists() -> None:
    assert len(config.REGIONS) == 34
    assert len(set(config.REGIONS)) == 34
    assert config.REGIONS[0] == "Andhra Pradesh"
    assert config.REGIONS[-1] == "West Bengal"
    assert config.MONTHS[0] == "January" and config.MONTHS[-1] == "December"
    assert list(config.YEARS) == sorted(config.YEARS)


@pytest.mark.parametrize(
    "field",
    ["NAV_TIMEOUT_SECONDS", "SELECTOR_TIMEOUT_SECONDS", "REPORT_BUTTON_TIMEOUT_SECONDS"],
)
def test_non_positive_timeouts_rejected(field: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, field, 0)

    with pytest.raises(ValueError, match=field):
        validate_runtime_config("tests")


def test_bad_base_url_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "BASE_URL", "ftp://example.com")

    with pytest.raises(ValueError, match="BASE_URL"):
        validate_runtime_config("cli")


def test_unknown_selection_rejected() -> None:
    with pytest.raises(ValueError, match="Atlantis"):
        validate_runtime_config("cli", regions=["Punjab", "Atlantis"])
    with pytest.raises(ValueError, match="Smarch"):
        validate_runtime_config("cli", months=["Smarch"])
    with pytest.raises(ValueError, match="year"):
        validate_runtime_config("cli", years=[])


def test_output_path_uses_data_dir(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)

    assert config.output_path(2016) == tmp_path / "crop_data_2016.csv"
