# ROLEGATE Command Line
"""
`rolegate` command line tool.

Modules:
    main: Argument parsing and dispatch
    commands: Subcommand handlers
"""

from .main import build_parser, main

__all__ = ["build_parser", "main"]
