"""Tests for TOML-based engine config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config import DEFAULT_CONFIG_PATH, load_engine_config, load_engine_configs


def _write(path: Path, body: str) -> Path:
    path.write_text(body.strip())
    return path


def test_load_engine_config_reads_every_section(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path / "tuned.toml",
        """
[system]
name = "tuned"
description = "Sharper updates"

[rating]
k_factor = 8.0
scale_factor = 300.0
distribution_alpha = 1.0
weight_floor = 0.01
min_rating = 5.0

[partition]
epsilon = 1e-9
max_participants = 16
max_nodes = 1000
""",
    )

    config = load_engine_config(config_path)

    assert config.name == "tuned"
    assert config.description == "Sharper updates"
    assert config.file_path == config_path
    assert config.rating.k_factor == pytest.approx(8.0)
    assert config.rating.scale_factor == pytest.approx(300.0)
    assert config.rating.distribution_alpha == pytest.approx(1.0)
    assert config.rating.weight_floor == pytest.approx(0.01)
    assert config.rating.min_rating == pytest.approx(5.0)
    assert config.partition.epsilon == pytest.approx(1e-9)
    assert config.partition.max_participants == 16
    assert config.partition.max_nodes == 1000
    assert config.as_config_json()["max_nodes"] == 1000
    assert config.as_config_json()["k_factor"] == pytest.approx(8.0)


def test_missing_sections_fall_back_to_defaults(tmp_path: Path) -> None:
    config = load_engine_config(_write(tmp_path / "bare.toml", '[system]\nname = "bare"'))

    assert config.description is None
    assert config.rating.k_factor == pytest.approx(4.0)
    assert config.rating.scale_factor == pytest.approx(400.0)
    assert config.rating.distribution_alpha == pytest.approx(0.6)
    assert config.partition.max_participants == 0
    assert config.partition.max_nodes == 50_000


def test_bundled_default_config_loads() -> None:
    config = load_engine_config(DEFAULT_CONFIG_PATH)

    assert config.name == "default"
    assert config.rating.k_factor == pytest.approx(4.0)
    assert config.partition.max_participants == 24
    assert config.partition.max_nodes == 50_000


def test_system_name_is_required(tmp_path: Path) -> None:
    config_path = _write(tmp_path / "nameless.toml", "[rating]\nk_factor = 4.0")

    with pytest.raises(ValueError, match="name is required"):
        load_engine_config(config_path)


@pytest.mark.parametrize(
    ("section", "body", "message"),
    [
        ("rating", "k_factor = 0.0", "k_factor must be > 0"),
        ("rating", "scale_factor = -1.0", "scale_factor must be > 0"),
        ("rating", "distribution_alpha = -0.1", "distribution_alpha must be >= 0"),
        ("rating", "weight_floor = 0.0", "weight_floor must be > 0"),
        ("rating", "min_rating = -2.0", "min_rating must be >= 0"),
        ("rating", "k_factor = inf", "k_factor must be finite"),
        ("partition", "epsilon = -1e-6", "epsilon must be >= 0"),
        ("partition", "max_participants = -1", "max_participants must be >= 0"),
        ("partition", "max_nodes = -5", "max_nodes must be >= 0"),
    ],
)
def test_invalid_parameters_are_rejected(tmp_path: Path, section: str, body: str, message: str) -> None:
    config_path = _write(
        tmp_path / "broken.toml",
        f'[system]\nname = "broken"\n\n[{section}]\n{body}',
    )

    with pytest.raises(ValueError, match=message):
        load_engine_config(config_path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_engine_config(tmp_path / "absent.toml")


def test_load_engine_configs_from_directory(tmp_path: Path) -> None:
    _write(tmp_path / "a.toml", '[system]\nname = "alpha"')
    _write(tmp_path / "b.toml", '[system]\nname = "beta"')

    configs = load_engine_configs(tmp_path)

    assert [config.name for config in configs] == ["alpha", "beta"]


def test_load_engine_configs_rejects_duplicate_names(tmp_path: Path) -> None:
    _write(tmp_path / "a.toml", '[system]\nname = "same"')
    _write(tmp_path / "b.toml", '[system]\nname = "same"')

    with pytest.raises(ValueError, match="Duplicate engine config names"):
        load_engine_configs(tmp_path)


def test_load_engine_configs_requires_toml_files(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No .toml config files"):
        load_engine_configs(tmp_path)
