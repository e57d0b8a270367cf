"""
soldocgen Command-Line Interface

This module provides the CLI entry point for soldocgen. It orchestrates the
pipeline: configuration -> artifacts -> resolving -> bundle output.

Usage:
    soldocgen docgen                       # Generate docs for current project
    soldocgen docgen /path/to/project -o docs/contracts --clear
    soldocgen compile --docgen             # Compile, then generate docs
    soldocgen prepare-input input.json     # Request devdoc/userdoc from solc

Design Principles:
    1. Sensible defaults: Works out-of-the-box for a Hardhat project layout
    2. Fail early: The output path is checked before anything is read
    3. Transparency: Shows what's happening with --verbose
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from soldocgen import __version__
from soldocgen.compiler import patch_standard_json, run_compile
from soldocgen.config import DocgenConfig, load_config
from soldocgen.errors import DocgenError
from soldocgen.pipeline import DocgenResult, run_docgen


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        type=str,
        nargs="?",
        default=".",
        help="Project root directory (default: current directory)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed progress information",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="soldocgen",
        description=(
            "soldocgen: NatSpec documentation from compiled Solidity artifacts.\n\n"
            "Merges each contract's devdoc and userdoc with its ABI and writes "
            "a static documentation bundle."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  soldocgen docgen                     # Use [tool.soldocgen] settings\n"
            "  soldocgen docgen . -o docs/api       # Custom output directory\n"
            "  soldocgen docgen . --clear           # Remove old bundle first\n"
            "  soldocgen compile --docgen           # Compile, then generate docs\n"
            "  soldocgen prepare-input input.json   # Patch solc standard-JSON input\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # docgen
    docgen_parser = subparsers.add_parser(
        "docgen",
        help="Generate the documentation bundle from compiled artifacts",
    )
    _add_common_arguments(docgen_parser)
    docgen_parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output directory, relative to the project root (default: ./docgen)",
    )
    docgen_parser.add_argument(
        "--clear",
        action="store_true",
        default=None,
        help="Delete the output directory before writing",
    )
    docgen_parser.add_argument(
        "--artifacts",
        type=str,
        default=None,
        help="Artifacts directory, relative to the project root (default: ./artifacts)",
    )
    docgen_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when two ABI members share a signature",
    )

    # compile
    compile_parser = subparsers.add_parser(
        "compile",
        help="Run the compile command, then docgen if enabled",
    )
    _add_common_arguments(compile_parser)
    compile_parser.add_argument(
        "--command",
        dest="compile_command",
        type=str,
        default=None,
        help="Compile command to run (default: npx hardhat compile)",
    )
    compile_parser.add_argument(
        "--docgen",
        action="store_true",
        default=None,
        help="Generate documentation after compiling (overrides run-on-compile)",
    )

    # prepare-input
    prepare_parser = subparsers.add_parser(
        "prepare-input",
        help="Add devdoc/userdoc output selections to a solc standard-JSON input",
    )
    prepare_parser.add_argument("input", type=str, help="Standard-JSON input file")
    prepare_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    return parser


def log(message: str, quiet: bool = False) -> None:
    """
    Print a message to stderr (for progress/status).

    Args:
        message: The message to print
        quiet: If True, suppress the message
    """
    if quiet:
        return
    print(f"[soldocgen] {message}", file=sys.stderr)


def log_verbose(message: str, verbose: bool, quiet: bool) -> None:
    """Print a message only in verbose mode."""
    if verbose and not quiet:
        print(f"  {message}", file=sys.stderr)


def report_result(result: DocgenResult, verbose: bool, quiet: bool) -> None:
    """Summarize a finished documentation run."""
    for contract_name, doc in sorted(result.docs.items()):
        log_verbose(f"{contract_name}: {doc.member_count()} members", verbose, quiet)

    for warning in result.warnings:
        log(f"Warning: {warning}", quiet=quiet)

    log(
        f"Documented {len(result.docs)} contract(s) in {result.output_directory}",
        quiet=quiet,
    )
    log_verbose(f"{len(result.written)} file(s) written", verbose, quiet)


def run_docgen_command(args: argparse.Namespace, config: DocgenConfig) -> int:
    root = Path(args.root).resolve()
    config = config.with_overrides(
        path=args.output,
        clear=args.clear,
        artifacts=args.artifacts,
    )

    log("Generating documentation...", quiet=args.quiet)
    log_verbose(f"Artifacts: {root / config.artifacts}", args.verbose, args.quiet)

    result = run_docgen(root, config, strict=args.strict)
    report_result(result, args.verbose, args.quiet)
    return 0


def run_compile_command(args: argparse.Namespace, config: DocgenConfig) -> int:
    root = Path(args.root).resolve()
    command = args.compile_command or config.compile_command

    log(f"Compiling: {command}", quiet=args.quiet)
    result = run_compile(root, config, command=command, docgen=args.docgen)

    if result is None:
        log("Compiled (documentation not requested)", quiet=args.quiet)
    else:
        report_result(result, args.verbose, args.quiet)
    return 0


def run_prepare_input_command(args: argparse.Namespace) -> int:
    patch_standard_json(args.input)
    log(f"Requested devdoc/userdoc in {args.input}", quiet=args.quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "prepare-input":
            return run_prepare_input_command(args)

        config = load_config(Path(args.root).resolve())

        if args.command == "compile":
            return run_compile_command(args, config)
        return run_docgen_command(args, config)

    except DocgenError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.__cause__ is not None and getattr(args, "verbose", False):
            print(f"  Caused by: {e.__cause__!r}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
