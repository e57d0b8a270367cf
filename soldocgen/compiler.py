"""
Compile Step Integration

The compiler only emits devdoc/userdoc when they are requested in the
outputSelection of its settings. This module adds those selections to
compiler configurations and standard-JSON input files, and runs the external
compile command with documentation generation chained after it.

Usage:
    compilers = [{"version": "0.8.24", "settings": {...}}]
    request_natspec_outputs(compilers)

    run_compile("/path/to/project", config)   # docgen follows if run_on_compile
"""

import json
import shlex
import subprocess
from pathlib import Path
from typing import Any, Iterable, Optional

from soldocgen.config import DocgenConfig
from soldocgen.errors import CompileError, ConfigurationError
from soldocgen.pipeline import DocgenResult, run_docgen

NATSPEC_OUTPUTS = ("devdoc", "userdoc")

# Compile commands can take a while on large projects
COMPILE_TIMEOUT_SECONDS = 600


def request_natspec_outputs(compilers: Iterable[dict[str, Any]]) -> None:
    """
    Add devdoc and userdoc to every compiler's "*"/"*" output selection.

    Missing settings/outputSelection tables are created. Outputs already
    selected are left alone, so calling this twice changes nothing.

    Args:
        compilers: Compiler configurations, each with an optional "settings"
    """
    for compiler in compilers:
        settings = compiler.setdefault("settings", {})
        selection = settings.setdefault("outputSelection", {})
        all_contracts = selection.setdefault("*", {}).setdefault("*", [])
        for output in NATSPEC_OUTPUTS:
            if output not in all_contracts:
                all_contracts.append(output)


def patch_standard_json(path: str | Path) -> dict[str, Any]:
    """
    Add the NatSpec output selections to a solc standard-JSON input file.

    The file is rewritten in place.

    Returns:
        The patched input document

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object
    """
    input_path = Path(path)
    try:
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read compiler input {input_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Compiler input is not a JSON object: {input_path}")

    request_natspec_outputs([data])

    with open(input_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    return data


def run_compile(
    root: str | Path,
    config: Optional[DocgenConfig] = None,
    command: Optional[str] = None,
    docgen: Optional[bool] = None,
) -> Optional[DocgenResult]:
    """
    Run the external compile command, then docgen if configured.

    Args:
        root: Project root; the command runs with it as working directory
        config: Options (defaults if not provided)
        command: Command line to run (default: config.compile_command)
        docgen: Force docgen on or off (default: config.run_on_compile)

    Returns:
        The DocgenResult if documentation was generated, else None

    Raises:
        CompileError: If the command cannot be started or exits non-zero
    """
    config = config or DocgenConfig()
    args = shlex.split(command or config.compile_command)
    if not args:
        raise CompileError("Compile command is empty")

    try:
        subprocess.run(
            args,
            cwd=str(root),
            check=True,
            capture_output=True,
            text=True,
            timeout=COMPILE_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as e:
        raise CompileError(f"Compile command not found: {args[0]}") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        raise CompileError(
            f"Compile command failed with exit code {e.returncode}: {detail}"
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CompileError(
            f"Compile command timed out ({COMPILE_TIMEOUT_SECONDS}s limit)"
        ) from e

    run_after = config.run_on_compile if docgen is None else docgen
    if not run_after:
        return None
    return run_docgen(root, config)
