"""Recency scores used to pick one copy of a file present in several exports.

Neither scorer reads a real timestamp. Exports do not carry a usable
modification time per media file, so these stand in until one exists.
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from chat_combine.core.types import ArchiveInspectionResult

PATH_FACTOR = 100


class RecencyScorer(ABC):
    """Scores a root-relative path; a higher score means newer."""

    @abstractmethod
    def score(self, path: str, source: ArchiveInspectionResult) -> float: ...


class PlaceholderRecencyScorer(RecencyScorer):
    """Wall clock minus random jitter plus a path-length bonus.

    Only as deterministic as the injected clock and RNG.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
        jitter_ms: int = 10_000_000,
        path_factor: int = PATH_FACTOR,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()
        self._jitter_ms = jitter_ms
        self._path_factor = path_factor

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> PlaceholderRecencyScorer:
        seed = config.get("seed")
        return cls(
            rng=random.Random(seed) if seed is not None else None,
            jitter_ms=int(config.get("jitter_ms", 10_000_000)),
            path_factor=int(config.get("path_factor", PATH_FACTOR)),
        )

    def score(self, path: str, source: ArchiveInspectionResult) -> float:
        now_ms = int(self._clock() * 1000)
        jitter = self._rng.randrange(self._jitter_ms) if self._jitter_ms > 0 else 0
        return now_ms - jitter + len(path) * self._path_factor


class PathLengthScorer(RecencyScorer):
    """Deterministic: same path, same score, so the first copy always stays."""

    def __init__(self, path_factor: int = PATH_FACTOR) -> None:
        self._path_factor = path_factor

    def score(self, path: str, source: ArchiveInspectionResult) -> float:
        return len(path) * self._path_factor
