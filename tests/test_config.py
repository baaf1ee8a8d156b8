import pytest

from product_cutout.config import CutoutSettings, clamp_quality


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("80", 80),
        ("0", 1),
        ("250", 100),
        ("72.9", 72),
        (None, 90),
        ("high", 90),
        (55, 55),
        ("inf", 90),
        ("-inf", 90),
        ("1e999", 90),
        ("nan", 90),
    ],
)
def test_clamp_quality(raw, expected) -> None:
    assert clamp_quality(raw, 90) == expected


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("MAX_DIMENSION", "1600")
    monkeypatch.setenv("SOFT_ALPHA", "yes")
    monkeypatch.setenv("PARALLEL_MASKS", "0")
    monkeypatch.setenv("DEFAULT_QUALITY", "300")
    monkeypatch.setenv("REMOVE_BG_API_KEY", "abc")

    settings = CutoutSettings.from_env()

    assert settings.max_dimension == 1600
    assert settings.soft_alpha is True
    assert settings.parallel_masks is False
    assert settings.default_quality == 100
    assert settings.remote_enabled


def test_defaults_keep_remote_disabled() -> None:
    settings = CutoutSettings()

    assert settings.remote_enabled is False
    assert settings.max_dimension == 1000
    assert settings.default_quality == 90


def test_non_finite_default_quality_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_QUALITY", "inf")

    assert CutoutSettings.from_env().default_quality == 90
