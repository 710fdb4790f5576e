"""
Treeshell CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import asyncio
import logging
import os
import sys
from argparse import REMAINDER, ArgumentParser
from pathlib import Path
from typing import Sequence

from rich.markup import escape

from treeshell.config import loader
from treeshell.console import console
from treeshell.exceptions import TreeshellError
from treeshell.utils import setup_logging
from treeshell.version import __version__


def find_treeshell_config() -> Path | None:
    candidates = [
        Path.cwd() / "treeshell.yaml",
        Path.cwd() / "treeshell.toml",
        Path.cwd() / ".treeshell.yaml",
        Path.cwd() / ".treeshell.toml",
        Path(os.environ.get("TREESHELL_CONFIG", "treeshell.yaml")),
        Path.home() / ".config" / "treeshell" / "treeshell.yaml",
        Path.home() / ".config" / "treeshell" / "treeshell.toml",
    ]
    return next((p for p in candidates if p.exists()), None)


def bootstrap(config_path: Path) -> None:
    """Make modules next to the config file importable for dotted action paths."""
    if str(config_path.parent) not in sys.path:
        sys.path.insert(0, str(config_path.parent))


def get_root_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="treeshell",
        description="Run a Treeshell command tree declared in YAML or TOML.",
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to the config file.")
    parser.add_argument(
        "--log-mode", choices=["cli", "json"], default=None, help="Logging output mode."
    )
    parser.add_argument(
        "--log-file", default="treeshell.log", help="File to write debug logs to."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show info logs on the console."
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "command",
        nargs=REMAINDER,
        help="Command to run once. Starts the interactive shell when omitted.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = get_root_parser().parse_args(argv)
    setup_logging(
        mode=args.log_mode,
        log_filename=args.log_file,
        console_log_level=logging.INFO if args.verbose else logging.WARNING,
    )

    config_path = args.config or find_treeshell_config()
    if not config_path:
        console.print(
            "[error]No treeshell.yaml or treeshell.toml found.[/error] "
            "Pass one with --config or set TREESHELL_CONFIG."
        )
        return 1

    bootstrap(config_path)
    try:
        shell = loader(config_path)
        asyncio.run(shell.run(args.command))
    except TreeshellError as error:
        console.print(f"[error]error:[/error] {escape(str(error))}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
