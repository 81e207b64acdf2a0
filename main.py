#!/usr/bin/env python3
"""
bach - Name analysis for the bach language.

Usage:
    bach <file.bach>              Check names and report every error
    bach <file.bach> --unparse    Print the program with resolved symbols
    bach <file.bach> --ast        Print the parsed AST (for debugging)
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from tatsu.exceptions import FailedParse
from tatsu.util import asjson

from bach.BachNameAnalyzer import BachNameAnalyzer
from bach.BachParser import BachParser
from bach.BachUnparser import unparse


# Version
VERSION = "0.4.0"


# Colors for terminal output
class Colors:
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"


def color_enabled():
    """Check if colors should be enabled."""
    return sys.stdout.isatty() and sys.stderr.isatty()


def c(text, color):
    """Colorize text if colors are enabled."""
    if color_enabled():
        return f"{color}{text}{Colors.ENDC}"
    return text


def print_error(msg):
    """Print an error message."""
    print(c("error:", Colors.RED + Colors.BOLD), msg, file=sys.stderr)


def print_warning(msg):
    """Print a warning message."""
    print(c("warning:", Colors.YELLOW + Colors.BOLD), msg, file=sys.stderr)


def print_info(msg):
    """Print an info message."""
    print(c("info:", Colors.CYAN + Colors.BOLD), msg, file=sys.stderr)


def print_success(msg):
    """Print a success message."""
    print(c("✓", Colors.GREEN + Colors.BOLD), msg, file=sys.stderr)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="bach",
        description="Resolve every identifier in a bach program and report name errors.",
    )
    parser.add_argument("file", metavar="FILE", help="bach source file (.bach)")
    parser.add_argument("-v", "--version", action="version", version=f"bach {VERSION}")
    parser.add_argument("--check", action="store_true", help="only report errors")
    parser.add_argument(
        "--unparse", action="store_true", help="print the program with resolved symbols"
    )
    parser.add_argument("--ast", action="store_true", help="print the parsed AST and exit")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    parser.add_argument("--quiet", "-q", action="store_true", help="suppress info messages")
    return parser.parse_args(argv)


def read_source(file_path: Path) -> str:
    """Read a source file, exiting with an error if it cannot be opened."""
    try:
        with open(file_path, "r") as f:
            return f.read()
    except FileNotFoundError:
        print_error(f"file not found: {file_path}")
        sys.exit(1)
    except PermissionError:
        print_error(f"permission denied: {file_path}")
        sys.exit(1)


def parse_source(source: str, file_path: Path):
    """Parse source into a Program, exiting on a syntax error."""
    try:
        return BachParser().parse(source)
    except FailedParse as e:
        print_error(f"parse error in {file_path}")
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    args = parse_args(argv)

    if args.no_color:
        global color_enabled
        color_enabled = lambda: False

    file_path = Path(args.file)
    if not file_path.suffix == ".bach":
        print_warning(f"file does not have .bach extension: {file_path}")

    source = read_source(file_path)
    program = parse_source(source, file_path)

    if args.ast:
        print(json.dumps(asjson(asdict(program)), indent=2))
        sys.exit(0)

    if not args.quiet:
        print_info(f"parsed {len(program.decls)} declaration(s) from {file_path}")

    analyzer = BachNameAnalyzer()
    errors = analyzer.analyze(program)

    if args.unparse and not args.check:
        print(unparse(program), end="")

    if analyzer.has_errors():
        print_error(f"found {len(errors)} error(s) in {file_path}")
        for error in errors:
            print(f"  {c('→', Colors.RED)} {error}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print_success(f"no errors in {file_path}")
    sys.exit(0)


if __name__ == "__main__":
    main()
