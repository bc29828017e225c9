from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from chat_combine.cli import output as out
from chat_combine.cli.config import (
    Config,
    config_exists,
    config_path_display,
    load_config,
    save_config,
)
from chat_combine.config import scorer_registry

DESCRIPTION = """\
chat-combine — merge several exports of one chat into a single archive

Telegram lets you export a chat only in pieces (by date range, with or
without media). chat-combine takes those export zips, checks they belong
to the same chat, merges their result.json files without duplicate
messages, and writes one combined zip with all media."""


# ── Infrastructure helpers ──────────────────────────────────────────


def _config_to_dict(cfg: Config) -> dict:
    """Convert CLI Config into the canonical config dict for ChatCombine."""
    storage_config: dict[str, Any] = {}
    if cfg.uses_disk:
        storage_config = {"base_path": cfg.storage_path}

    scorer_config: dict[str, Any] = {}
    if cfg.scorer_seed is not None and cfg.scorer_provider == "placeholder":
        scorer_config = {"seed": cfg.scorer_seed}

    return {
        "storage": {"provider": cfg.storage_provider, "config": storage_config},
        "scorer": {"provider": cfg.scorer_provider, "config": scorer_config},
        "settings": {"compress_level": cfg.compress_level},
    }


def _build_cc(cfg: Config):
    from chat_combine import ChatCombine

    return ChatCombine.from_config(_config_to_dict(cfg))


def _read_inputs(paths: list[str]):
    """Load archive files, exiting with guidance if any is missing."""
    from chat_combine import ArchiveInput

    missing = [p for p in paths if not Path(p).is_file()]
    if missing:
        for p in missing:
            out.error(f"File not found: {p}")
        sys.exit(1)
    return [ArchiveInput.from_path(p) for p in paths]


def _print_card(result) -> None:
    """Print one archive's inspection summary."""
    out.header(result.display_name)
    if not result.is_valid:
        out.error(result.reason or "Invalid export")
        return

    out.kv("Root", result.root_prefix or out.dim("(archive root)"))
    out.kv("Files", f"{len(result.entries):,}")
    if result.analysis_summary is not None:
        analysis = result.analysis_summary
        out.kv("Messages", f"{analysis.message_count:,}")
        out.kv("Date range", analysis.date_range_label())
    for item in result.top_level_summary:
        if item.is_directory:
            out.kv(f"  {item.name}/", f"{item.file_count or 0:,} files")
        else:
            out.kv(f"  {item.name}", out.human_size(item.size))


async def _inspect_or_exit(cc, paths: list[str]):
    batch = await cc.inspect(_read_inputs(paths))
    for failure in batch.failures:
        out.error(f"{failure.name}: {failure.message}")
    return batch


def _forget_all(cc, batch) -> None:
    """Drop the stored copies once a command is done with them."""
    for result in batch.results:
        cc.forget(result)


def _chat_id_label(chat_id: int | None) -> str:
    return "unknown" if chat_id is None else str(chat_id)


# ── inspect ─────────────────────────────────────────────────────────


async def cmd_inspect(args: argparse.Namespace) -> None:
    """Show the resolved root and top-level layout of each archive."""
    cfg = load_config()
    cc = _build_cc(cfg)

    batch = await _inspect_or_exit(cc, args.paths)
    _forget_all(cc, batch)
    for result in batch.results:
        _print_card(result)
    print()

    if batch.failures or batch.invalid:
        sys.exit(1)


# ── analyze ─────────────────────────────────────────────────────────


async def cmd_analyze(args: argparse.Namespace) -> None:
    """Check that the archives can be combined and summarise them."""
    from chat_combine import ChatCombineError

    cfg = load_config()
    cc = _build_cc(cfg)

    batch = await _inspect_or_exit(cc, args.paths)
    try:
        if not batch.ready:
            for result in batch.invalid:
                out.error(f"{result.display_name}: {result.reason}")
            out.error("Analysis needs at least two valid exports.")
            sys.exit(1)

        try:
            report = await cc.check_compatibility(batch.results)
        except ChatCombineError as exc:
            out.error(f"Error analyzing files: {exc.message}")
            sys.exit(1)
    finally:
        _forget_all(cc, batch)

    for result, analysis in zip(batch.results, report.analyses, strict=True):
        _print_card(result.with_analysis(analysis))

    out.header("Analysis Results")
    out.rule()
    out.kv("Chat name", report.identity.chat_name or "Unknown Chat")
    out.kv("Chat ID", _chat_id_label(report.identity.chat_id))
    out.kv("Total messages across all files", f"{report.total_messages:,}")
    span = report.date_span
    out.kv("Date range", span.label() if span else "unknown")
    for warning in report.warnings:
        out.warn(warning.message)

    print()
    out.header("Next step:")
    out.next_step("chat-combine combine " + " ".join(args.paths))
    print()


# ── combine ─────────────────────────────────────────────────────────


async def cmd_combine(args: argparse.Namespace) -> None:
    """Combine the archives and write the result to disk."""
    from chat_combine import CombineError

    cfg = load_config()
    cfg.ensure_dirs()
    cc = _build_cc(cfg)

    batch = await _inspect_or_exit(cc, args.paths)
    try:
        if batch.failures:
            sys.exit(1)

        try:
            result = await cc.combine(batch.results, subject=args.subject)
        except CombineError as exc:
            out.error(exc.message)
            sys.exit(1)
    finally:
        _forget_all(cc, batch)

    dest = Path(args.out) if args.out else Path(cfg.output_dir) / result.filename
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(result.blob)

    for name in result.skipped:
        out.warn(f"Skipped {name}: no result.json")
    for warning in result.warnings:
        out.warn(warning.message)

    out.success("Combined Export Ready")
    chat_name = result.identity.chat_name or "Unknown Chat"
    out.kv("Chat", f"{chat_name} ({_chat_id_label(result.identity.chat_id)})")
    out.kv("Total messages", f"{result.stats.unique_message_count:,}")
    if result.stats.duplicates_removed > 0:
        out.kv("Duplicate messages removed", f"{result.stats.duplicates_removed:,}")
    out.kv("Total files", f"{result.total_files:,}")
    if result.folders:
        out.kv("Folders included", ", ".join(result.folders))
    out.kv("Written to", dest)
    print()


# ── config ──────────────────────────────────────────────────────────


async def cmd_config_show(args: argparse.Namespace) -> None:
    """Display current configuration."""
    cfg = load_config()

    out.header(f"Configuration ({config_path_display()})")
    print()

    if cfg.uses_disk:
        out.kv("Storage", f"disk ({cfg.storage_path})")
    else:
        out.kv("Storage", "memory (nothing kept after the command)")
    seed = f", seed {cfg.scorer_seed}" if cfg.scorer_seed is not None else ""
    out.kv("Recency scorer", f"{cfg.scorer_provider}{seed}")
    out.kv("Output directory", cfg.output_dir)
    if cfg.compress_level is not None:
        out.kv("Compression level", cfg.compress_level)

    print()
    out.info("To change settings:")
    out.next_step(
        "chat-combine config set-scorer path-length", "deterministic winners"
    )
    out.next_step(
        "chat-combine config set-storage disk", "keep raw archives on disk"
    )
    print()


async def cmd_config_set_scorer(args: argparse.Namespace) -> None:
    """Choose the recency scorer used for duplicate media paths."""
    cfg = load_config() if config_exists() else Config()
    available = scorer_registry.names()
    if args.scorer not in available:
        choices = ", ".join(available)
        out.error(f"Unknown scorer '{args.scorer}'. Choose from: {choices}")
        sys.exit(1)

    cfg.scorer_provider = args.scorer
    cfg.scorer_seed = args.seed
    path = save_config(cfg)
    out.success(f"Recency scorer set to {args.scorer}. Config written to {path}")


async def cmd_config_set_storage(args: argparse.Namespace) -> None:
    """Configure where raw archives are kept during a command."""
    cfg = load_config() if config_exists() else Config()
    cfg.storage_provider = args.backend
    if args.path:
        cfg.storage_path = args.path
    path = save_config(cfg)
    out.success(f"Storage set to {args.backend}. Config written to {path}")


async def cmd_config_path(args: argparse.Namespace) -> None:
    """Print the config file path."""
    print(config_path_display())


# ── Parser ──────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chat-combine",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Typical session:\n"
            "  chat-combine inspect part1.zip part2.zip     "
            "Check each export\n"
            "  chat-combine analyze part1.zip part2.zip     "
            "Confirm they are the same chat\n"
            "  chat-combine combine part1.zip part2.zip     "
            "Write combined_<chat>.zip\n"
            "\n"
            "Configuration:\n"
            "  chat-combine config show                     "
            "Show current settings\n"
            "  chat-combine config path                     "
            "Print config file location\n"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress logs",
    )
    sub = parser.add_subparsers(dest="command", title="commands")

    p_inspect = sub.add_parser("inspect", help="Show what each export archive holds")
    p_inspect.add_argument("paths", nargs="+", metavar="ZIP", help="Export archives")

    p_analyze = sub.add_parser(
        "analyze", help="Check that exports belong to one chat and summarise them"
    )
    p_analyze.add_argument("paths", nargs="+", metavar="ZIP", help="Export archives")

    p_combine = sub.add_parser("combine", help="Combine exports into one archive")
    p_combine.add_argument("paths", nargs="+", metavar="ZIP", help="Export archives")
    p_combine.add_argument(
        "-o", "--out", metavar="PATH", help="Output file (default: output dir)"
    )
    p_combine.add_argument(
        "--subject",
        metavar="NAME",
        help="Name used in combined_<NAME>.zip (default: telegram_export)",
    )

    p_cfg = sub.add_parser("config", help="View and change settings")
    cfg_sub = p_cfg.add_subparsers(dest="config_command")
    cfg_sub.add_parser("show", help="Show current settings")
    cfg_sub.add_parser("path", help="Print config file location")

    p_cfg_scorer = cfg_sub.add_parser(
        "set-scorer", help="Choose how duplicate media paths are resolved"
    )
    p_cfg_scorer.add_argument("scorer", help="placeholder or path-length")
    p_cfg_scorer.add_argument(
        "--seed", type=int, default=None, help="Seed for the placeholder scorer"
    )

    p_cfg_storage = cfg_sub.add_parser(
        "set-storage", help="Configure where raw archives are kept"
    )
    p_cfg_storage.add_argument("backend", choices=["memory", "disk"])
    p_cfg_storage.add_argument("--path", help="Directory for the disk backend")

    return parser


# ── Dispatch ────────────────────────────────────────────────────────

_CommandHandler = Callable[[argparse.Namespace], Coroutine[Any, Any, None]]

_COMMAND_MAP: dict[str, _CommandHandler] = {
    "inspect": cmd_inspect,
    "analyze": cmd_analyze,
    "combine": cmd_combine,
}

_CONFIG_MAP: dict[str, _CommandHandler] = {
    "show": cmd_config_show,
    "path": cmd_config_path,
    "set-scorer": cmd_config_set_scorer,
    "set-storage": cmd_config_set_storage,
}


def main() -> None:
    import logging

    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="  %(name)s: %(message)s",
        )

    if not args.command:
        out.banner()
        parser.print_help()
        return

    if args.command == "config":
        if not args.config_command:
            parser.parse_args(["config", "--help"])
            return
        handler = _CONFIG_MAP.get(args.config_command)
    else:
        handler = _COMMAND_MAP.get(args.command)

    if handler is None:
        parser.print_help()
        return

    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        print()
