"""Batch combinators: per-item, fail-fast and collect-all mapping."""

from .batch import map_all, map_collect_errors, map_items

__all__ = ["map_items", "map_all", "map_collect_errors"]
