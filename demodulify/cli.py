"""CLI entrypoints for demodulify commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Mapping

from .config import CONFIG_FILENAME, BuildMode, LogLevel, load_config, merge_options
from .errors import DemodulifyError
from .graph.snapshot import load_snapshot
from .logging import bind_logger, configure_logging, resolve_log_level
from .plugin import DemodulifyPlugin


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="demodulify",
        description="Flatten a bundler module graph into a single namespaced script.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Emit the flattened artifact for a module-graph snapshot.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "snapshot",
        help="Path to the module-graph snapshot (.json, .yml or .yaml).",
    )
    build_parser.add_argument(
        "--out-dir",
        default=None,
        help="Directory for emitted assets (defaults to 'dist' next to the snapshot).",
    )
    build_parser.add_argument(
        "--config",
        default=None,
        help=f"Config file or directory containing {CONFIG_FILENAME} (defaults to the snapshot's directory).",
    )
    build_parser.add_argument("--namespace-root", default=None, help="Root global namespace segment(s).")
    build_parser.add_argument("--subsystem", default=None, help="Subsystem namespace segment(s).")
    build_parser.add_argument(
        "--build-mode",
        choices=[mode.value for mode in BuildMode],
        default=None,
        help="Artifact kind: server script (gas/common) or HTML page (ui).",
    )
    build_parser.add_argument(
        "--default-export-name",
        default=None,
        help="Namespace key for the entry module's default export.",
    )
    build_parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Pipeline log verbosity (LOGLEVEL environment variable takes precedence).",
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the artifact instead of writing assets.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for demodulify commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    verbose = bool(getattr(args, "verbose", False))
    configure_logging(verbose=verbose)

    if args.command == "build":
        try:
            _run_build(args, verbose=verbose)
        except DemodulifyError as exc:
            parser.exit(1, f"demodulify build failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(args: argparse.Namespace, *, verbose: bool) -> None:
    snapshot_path = Path(args.snapshot).expanduser().resolve()
    config_path = Path(args.config) if args.config else snapshot_path.parent

    overrides: Dict[str, Any] = {
        "namespace_root": args.namespace_root,
        "subsystem": args.subsystem,
        "build_mode": args.build_mode,
        "default_export_name": args.default_export_name,
        "log_level": args.log_level or ("debug" if verbose else None),
    }
    options = merge_options(load_config(config_path), overrides)
    level = resolve_log_level(options.log_level.value)
    if level == "debug" and not verbose:
        configure_logging(verbose=True)

    graph = load_snapshot(snapshot_path)
    plugin = DemodulifyPlugin(options, logger=bind_logger("plugin", level))
    assets = graph.assets()
    artifact = plugin.process_assets(graph, assets)

    if args.dry_run:
        print(artifact.content, end="")
        return

    out_dir = Path(args.out_dir) if args.out_dir else snapshot_path.parent / "dist"
    written = write_assets(assets, out_dir)
    print(f"Emitted {artifact.name} ({len(written)} asset(s) written to {_relativize(out_dir)})")


def write_assets(assets: Mapping[str, str], out_dir: Path) -> list[Path]:
    """Write every asset into ``out_dir`` and return the written paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, content in assets.items():
        path = out_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
