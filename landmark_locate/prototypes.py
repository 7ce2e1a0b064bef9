"""Loading of the landmark prototype embeddings.

Two JSON layouts are accepted:

- a flat map ``{"<landmark_id>": [floats], ...}``
- a list of records ``[{"landmark_id": id, "embedding": [floats], ...}, ...]``
  where the first record per id wins

The layout is resolved once, at load time, by trying each parser in turn.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class PrototypeTable:
    """Read-only id -> unit vector table backed by one (N, D) matrix."""

    def __init__(self, ids: list[int], matrix: np.ndarray) -> None:
        if matrix.ndim != 2 or matrix.shape[0] != len(ids):
            raise ValueError(f"matrix shape {matrix.shape} does not match {len(ids)} ids")
        self.ids = list(ids)
        self.matrix = matrix
        self._index = {lid: i for i, lid in enumerate(self.ids)}

    @classmethod
    def empty(cls) -> "PrototypeTable":
        return cls([], np.zeros((0, 0), dtype=np.float32))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, Any]]) -> "PrototypeTable":
        """Build from (id, vector) pairs; duplicates and off-dimension vectors are skipped."""
        ids: list[int] = []
        seen: set[int] = set()
        rows: list[np.ndarray] = []
        dim: Optional[int] = None
        skipped = 0
        for lid, vec in pairs:
            if lid in seen:
                continue
            try:
                arr = np.asarray(vec, dtype=np.float32).reshape(-1)
            except (TypeError, ValueError):
                skipped += 1
                continue
            if arr.size == 0 or not np.all(np.isfinite(arr)):
                skipped += 1
                continue
            if dim is None:
                dim = arr.size
            elif arr.size != dim:
                skipped += 1
                continue
            seen.add(lid)
            ids.append(lid)
            rows.append(arr)
        if skipped:
            logger.warning("Skipped %d prototype entries with bad or mismatched vectors", skipped)
        if not rows:
            return cls.empty()
        return cls(ids, np.vstack(rows))

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, landmark_id: object) -> bool:
        return landmark_id in self._index

    @property
    def dim(self) -> int:
        return int(self.matrix.shape[1]) if len(self) else 0

    def row(self, landmark_id: int) -> int:
        return self._index[landmark_id]

    def vector(self, landmark_id: int) -> np.ndarray:
        return self.matrix[self._index[landmark_id]]


def _to_id(raw: Any) -> Optional[int]:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def _parse_id_map(data: Any) -> Optional[Iterator[Tuple[int, Any]]]:
    if not isinstance(data, dict):
        return None

    def pairs():
        for key, value in data.items():
            lid = _to_id(key)
            if lid is not None and isinstance(value, list):
                yield lid, value

    return pairs()


def _parse_record_list(data: Any) -> Optional[Iterator[Tuple[int, Any]]]:
    if not isinstance(data, list):
        return None

    def pairs():
        for item in data:
            if not isinstance(item, dict):
                continue
            lid = _to_id(item.get("landmark_id"))
            embedding = item.get("embedding")
            if lid is not None and isinstance(embedding, list):
                yield lid, embedding

    return pairs()


PARSERS: list[Tuple[str, Callable[[Any], Optional[Iterator[Tuple[int, Any]]]]]] = [
    ("id_map", _parse_id_map),
    ("record_list", _parse_record_list),
]


def parse_prototypes(data: Any) -> PrototypeTable:
    for name, parser in PARSERS:
        pairs = parser(data)
        if pairs is None:
            continue
        table = PrototypeTable.from_pairs(pairs)
        logger.info("Parsed %d prototypes (%s layout, dim=%d)", len(table), name, table.dim)
        return table
    logger.warning("Unrecognised prototype layout: %s", type(data).__name__)
    return PrototypeTable.empty()


def load_prototypes(path: str | os.PathLike[str]) -> PrototypeTable:
    """Load a prototype JSON file. Never raises; an unusable file gives an empty table."""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not load prototypes from %s: %s", p, e)
        return PrototypeTable.empty()
    table = parse_prototypes(data)
    if not len(table):
        logger.warning("Prototype file %s is empty or invalid; visual matching is disabled", p)
    return table
