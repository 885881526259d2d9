"""Entry point: python -m precept <command>

- resolve <file>    Print applicable artifact ids in precedence order
- render <file>     Print the assembled Markdown instruction context
- conflicts <file>  Print detected conflicts (exit 1 when any)
- list              List all loaded artifacts
- import <library>  Import artifacts from a shared library
- refresh <library> Refresh imported artifacts from a library
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from precept.config import PreceptConfig, load_config
from precept.errors import PreceptError


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="precept", description=__doc__.splitlines()[0])
    parser.add_argument("--config", type=Path, help="Path to precept.toml")
    parser.add_argument("--root", type=Path, help="Project root (overrides config)")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in [
        ("resolve", "print applicable artifact ids in precedence order"),
        ("render", "print the assembled instruction context"),
        ("conflicts", "print detected conflicts"),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("file", nargs="?", help="File being edited (relative to root)")
        p.add_argument("--scenario", action="append", default=[], help="Scenario name")
        p.add_argument("--framework", action="append", default=[], help="Framework name")
        p.add_argument("--language", action="append", default=[], help="Language name")

    sub.add_parser("list", help="list all loaded artifacts")

    for name in ("import", "refresh"):
        p = sub.add_parser(name, help=f"{name} artifacts from a library")
        p.add_argument("library", type=Path, help="Library root (containing copilot/)")
        p.add_argument("--only", action="append", help="Limit to these artifact ids")
    return parser


def _context(args: argparse.Namespace):
    from precept.context import Context

    return Context.for_file(
        args.file,
        scenarios=args.scenario,
        frameworks=args.framework,
        languages=args.language,
    )


def _run_resolution(config: PreceptConfig, args: argparse.Namespace) -> int:
    from precept.core import Precept

    precept = Precept.from_config(config)
    detect = args.command == "conflicts" or (
        args.command == "render" and config.resolution.detect_conflicts
    )
    resolution = precept.applicable(_context(args), detect_conflicts=detect)

    if args.command == "resolve":
        for artifact_id in resolution.ids:
            print(artifact_id)
        return 0
    if args.command == "render":
        print(precept.render(resolution))
        return 0

    for c in resolution.conflicts:
        print(f"{c.first.id} <> {c.second.id}: {c.description}")
    return 1 if resolution.conflicts else 0


def _run_list(config: PreceptConfig) -> int:
    from precept.core import Precept

    precept = Precept.from_config(config)
    for artifact in precept.artifacts:
        version = precept.version_of(artifact) or "-"
        globs = ",".join(artifact.apply_to) or "-"
        print(f"{artifact.id}\t{artifact.category}\t{version}\t{globs}")
    return 0


def _run_import(config: PreceptConfig, args: argparse.Namespace) -> int:
    from precept.importer import import_library, refresh_library
    from precept.registry import Registry

    registry = Registry.load(config.registry_path)
    library_copilot = args.library / config.paths.copilot_dir
    run = import_library if args.command == "import" else refresh_library
    report = run(library_copilot, config.copilot_dir, registry, only=args.only)
    registry.save(config.registry_path)
    print(report.summary())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except PreceptError as e:
        print(f"precept: {e}", file=sys.stderr)
        return 2
    if args.root:
        config.root = args.root
    _setup_logging(config.log_level)

    try:
        if args.command in ("resolve", "render", "conflicts"):
            return _run_resolution(config, args)
        if args.command == "list":
            return _run_list(config)
        return _run_import(config, args)
    except PreceptError as e:
        print(f"precept: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
