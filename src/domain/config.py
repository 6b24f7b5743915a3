"""Load engine parameters from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import math
import tomllib

from domain.balancing.partitioner import PartitionParameters
from domain.ratings.calculator import RatingParameters

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "default.toml"


@dataclass(frozen=True)
class EngineConfig:
    """One named set of rating and partition parameters."""

    name: str
    description: str | None
    file_path: Path
    rating: RatingParameters
    partition: PartitionParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "k_factor": self.rating.k_factor,
            "scale_factor": self.rating.scale_factor,
            "distribution_alpha": self.rating.distribution_alpha,
            "weight_floor": self.rating.weight_floor,
            "min_rating": self.rating.min_rating,
            "epsilon": self.partition.epsilon,
            "max_participants": self.partition.max_participants,
            "max_nodes": self.partition.max_nodes,
        }


def load_engine_config(file_path: Path) -> EngineConfig:
    """Load and validate a single engine TOML file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_engine_config(raw, file_path)


def load_engine_configs(config_dir: Path) -> list[EngineConfig]:
    """Load every engine TOML file in a directory with duplicate-name validation."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    configs = [load_engine_config(file_path) for file_path in config_files]
    names = [config.name for config in configs]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate engine config names found in {config_dir}: {names}")
    return configs


def _parse_engine_config(raw: dict[str, Any], file_path: Path) -> EngineConfig:
    system_raw = raw.get("system", {})
    rating_raw = raw.get("rating", {})
    partition_raw = raw.get("partition", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    rating = RatingParameters(
        k_factor=float(rating_raw.get("k_factor", 4.0)),
        scale_factor=float(rating_raw.get("scale_factor", 400.0)),
        distribution_alpha=float(rating_raw.get("distribution_alpha", 0.6)),
        weight_floor=float(rating_raw.get("weight_floor", 1e-6)),
        min_rating=float(rating_raw.get("min_rating", 0.0)),
    )
    partition = PartitionParameters(
        epsilon=float(partition_raw.get("epsilon", 1e-12)),
        max_participants=int(partition_raw.get("max_participants", 0)),
        max_nodes=int(partition_raw.get("max_nodes", 50_000)),
    )
    _validate_rating(file_path=file_path, rating=rating)
    _validate_partition(file_path=file_path, partition=partition)

    return EngineConfig(
        name=name,
        description=description,
        file_path=file_path,
        rating=rating,
        partition=partition,
    )


def _validate_rating(*, file_path: Path, rating: RatingParameters) -> None:
    for field_name in ("k_factor", "scale_factor", "distribution_alpha", "weight_floor", "min_rating"):
        if not math.isfinite(getattr(rating, field_name)):
            raise ValueError(f"{file_path}: [rating].{field_name} must be finite")
    if rating.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].k_factor must be > 0")
    if rating.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].scale_factor must be > 0")
    if rating.distribution_alpha < 0.0:
        raise ValueError(f"{file_path}: [rating].distribution_alpha must be >= 0")
    if rating.weight_floor <= 0.0:
        raise ValueError(f"{file_path}: [rating].weight_floor must be > 0")
    if rating.min_rating < 0.0:
        raise ValueError(f"{file_path}: [rating].min_rating must be >= 0")


def _validate_partition(*, file_path: Path, partition: PartitionParameters) -> None:
    if not math.isfinite(partition.epsilon) or partition.epsilon < 0.0:
        raise ValueError(f"{file_path}: [partition].epsilon must be >= 0")
    if partition.max_participants < 0:
        raise ValueError(f"{file_path}: [partition].max_participants must be >= 0")
    if partition.max_nodes < 0:
        raise ValueError(f"{file_path}: [partition].max_nodes must be >= 0")


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "EngineConfig",
    "load_engine_config",
    "load_engine_configs",
]
