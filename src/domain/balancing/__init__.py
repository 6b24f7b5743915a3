"""Team partitioning."""

from domain.balancing.partitioner import PartitionParameters, derive_seed, partition, spread

__all__ = ["PartitionParameters", "derive_seed", "partition", "spread"]
