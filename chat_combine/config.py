from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel, Field

from chat_combine.core.exceptions import UnknownProviderError
from chat_combine.storage.base import StorageBackend

if TYPE_CHECKING:
    from chat_combine.package.recency import RecencyScorer


class CombineSettings(BaseModel):
    """Knobs shared by the inspector, merge engine and packager."""

    log_filename: str = "result.json"
    """Name of the message log that marks an export's root."""

    hidden_prefix: str = "."
    """Entries whose path starts with this are never part of an export."""

    metadata_dirs: tuple[str, ...] = ("__MACOSX",)
    """Platform metadata directories, matched against every path component."""

    json_indent: int | None = 1
    compress_level: int | None = Field(default=None, ge=0, le=9)

    output_template: str = "combined_{subject}.zip"
    default_subject: str = "telegram_export"


T = TypeVar("T")


class _Registry(Generic[T]):
    """Lazily-populated factory registry.

    Each backend module registers itself via :meth:`register`.
    :meth:`build` resolves a provider name to a factory, calling
    ``factory.from_config(config)`` if available, otherwise
    ``factory(**config)``.
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._factories: dict[str, type[T]] = {}
        self._defaults_loaded = False

    def register(self, name: str, cls: type[T]) -> None:
        self._factories[name] = cls

    def names(self) -> list[str]:
        self._ensure_defaults()
        return list(self._factories)

    def build(self, provider: str, config: dict[str, Any]) -> T:
        self._ensure_defaults()

        factory = self._factories.get(provider)
        if factory is None:
            raise UnknownProviderError(
                f"Unknown {self._label} provider '{provider}'. "
                f"Available: {list(self._factories)}"
            )
        if hasattr(factory, "from_config"):
            return factory.from_config(config)  # type: ignore[return-value]
        return factory(**config)  # type: ignore[return-value]

    def _ensure_defaults(self) -> None:
        if not self._defaults_loaded:
            self._load_defaults()
            self._defaults_loaded = True

    def _load_defaults(self) -> None:
        """Subclasses register their built-in factories here."""


class _StorageRegistry(_Registry[StorageBackend]):
    def _load_defaults(self) -> None:
        from chat_combine.storage.disk import DiskStorage
        from chat_combine.storage.memory import InMemoryStorage

        self.register("memory", InMemoryStorage)
        self.register("disk", DiskStorage)


class _ScorerRegistry(_Registry["RecencyScorer"]):
    def _load_defaults(self) -> None:
        from chat_combine.package.recency import (
            PathLengthScorer,
            PlaceholderRecencyScorer,
        )

        self.register("placeholder", PlaceholderRecencyScorer)
        self.register("path-length", PathLengthScorer)


# Singleton instances
storage_registry = _StorageRegistry("storage")
scorer_registry = _ScorerRegistry("scorer")


def parse_config(
    config: dict[str, Any],
) -> tuple[StorageBackend, RecencyScorer, CombineSettings]:
    """Parse a user config dict and return (storage, scorer, settings).

    Expected shape::

        {
            "storage": {"provider": "disk", "config": {"base_path": "/tmp"}},
            "scorer": {"provider": "placeholder", "config": {}},
            "settings": {"log_filename": "result.json"},
        }

    Every section is optional: storage defaults to in-memory, the scorer to
    the placeholder heuristic and settings to :class:`CombineSettings`.
    """
    storage_cfg = config.get("storage") or {}
    scorer_cfg = config.get("scorer") or {}

    storage = storage_registry.build(
        storage_cfg.get("provider", "memory"),
        storage_cfg.get("config", {}),
    )
    scorer = scorer_registry.build(
        scorer_cfg.get("provider", "placeholder"),
        scorer_cfg.get("config", {}),
    )
    settings = CombineSettings.model_validate(config.get("settings") or {})

    return storage, scorer, settings
