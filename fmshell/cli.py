#!/usr/bin/env python3
"""
Command-line entry point for fmshell
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fmshell.core.config import Config
from fmshell.core.constants import APP_NAME, APP_VERSION, DEFAULT_USERNAME
from fmshell.core.session import ShellState
from fmshell.shell import FileManagerShell

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    # The REPL owns the terminal; only warnings unless asked
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fmshell',
        description=f'{APP_NAME} - Interactive file manager shell',
    )
    parser.add_argument('--username', default=DEFAULT_USERNAME,
                        help='Name shown in the welcome and farewell messages')
    parser.add_argument('--config', type=Path, help='Path to a JSON config file')
    parser.add_argument('--verbose', action='store_true', help='Verbose (debug) logging')
    parser.add_argument('--version', action='version', version=f'{APP_NAME} v{APP_VERSION}')
    return parser


def parse_args(argv: Optional[List[str]] = None):
    """Parse known options; anything else is ignored"""
    args, unknown = build_parser().parse_known_args(argv)
    args.username = args.username or DEFAULT_USERNAME
    return args, unknown


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args, unknown = parse_args(argv)
    setup_logging(args.verbose)

    if unknown:
        logger.debug("Ignoring unknown arguments: %s", unknown)

    config = Config(args.config) if args.config else Config()
    shell = FileManagerShell(
        username=args.username,
        state=ShellState(username=args.username),
        config=config,
    )
    return shell.run()


if __name__ == '__main__':
    sys.exit(main())
