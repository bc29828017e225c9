"""Configuration management for the chat-combine CLI.

Reads/writes a TOML config file and provides a typed Config dataclass.
Default location: ``~/.config/chat-combine/config.toml``.
Override with the ``CHAT_COMBINE_CONFIG`` environment variable.

Example file::

    [storage]
    provider = "memory"        # or "disk"
    path = "./data/storage"    # only used by the disk provider

    [scorer]
    provider = "placeholder"   # or "path-length"
    seed = 7                   # optional, makes placeholder scores repeatable

    [output]
    dir = "."
    compress_level = 6
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_CONFIG_DIR = Path("~/.config/chat-combine").expanduser()
_DEFAULT_STORAGE_PATH = Path("./data/storage")


def _config_path() -> Path:
    env = os.environ.get("CHAT_COMBINE_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class Config:
    # Raw archive storage: "memory" (default, nothing persists) or "disk"
    storage_provider: str = "memory"
    storage_path: str = str(_DEFAULT_STORAGE_PATH)

    # Recency scorer used when the same media path exists in several exports
    scorer_provider: str = "placeholder"
    scorer_seed: int | None = None

    output_dir: str = "."
    compress_level: int | None = None

    @property
    def uses_disk(self) -> bool:
        return self.storage_provider == "disk"

    def ensure_dirs(self) -> None:
        """Create the output (and disk storage) directories if missing."""
        Path(self.output_dir).mkdir(parents=True, exist_ok=True)
        if self.uses_disk:
            Path(self.storage_path).mkdir(parents=True, exist_ok=True)


def load_config() -> Config:
    """Load config from disk, falling back to defaults + env overrides."""
    path = _config_path()
    cfg = Config()

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        storage_section = data.get("storage", {})
        scorer_section = data.get("scorer", {})
        output_section = data.get("output", {})

        cfg.storage_provider = storage_section.get("provider", cfg.storage_provider)
        cfg.storage_path = storage_section.get("path", cfg.storage_path)

        cfg.scorer_provider = scorer_section.get("provider", cfg.scorer_provider)
        if "seed" in scorer_section:
            cfg.scorer_seed = int(scorer_section["seed"])

        cfg.output_dir = output_section.get("dir", cfg.output_dir)
        if "compress_level" in output_section:
            cfg.compress_level = int(output_section["compress_level"])

    # Environment variables always take precedence
    cfg.storage_provider = os.environ.get("CHAT_COMBINE_STORAGE", cfg.storage_provider)
    cfg.scorer_provider = os.environ.get("CHAT_COMBINE_SCORER", cfg.scorer_provider)
    cfg.output_dir = os.environ.get("CHAT_COMBINE_OUTPUT_DIR", cfg.output_dir)

    return cfg


def save_config(cfg: Config) -> Path:
    """Write config to the TOML file. Returns the path written."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "[storage]",
        f'provider = "{cfg.storage_provider}"',
    ]
    if cfg.uses_disk:
        lines.append(f'path = "{cfg.storage_path}"')
    lines.extend(["", "[scorer]", f'provider = "{cfg.scorer_provider}"'])
    if cfg.scorer_seed is not None:
        lines.append(f"seed = {cfg.scorer_seed}")
    lines.extend(["", "[output]", f'dir = "{cfg.output_dir}"'])
    if cfg.compress_level is not None:
        lines.append(f"compress_level = {cfg.compress_level}")
    lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def config_exists() -> bool:
    return _config_path().exists()


def config_path_display() -> str:
    return str(_config_path())
