"""
soldocgen Configuration

Options are read from the [tool.soldocgen] table of the project's
pyproject.toml and may be overridden on the command line.

Example:
    [tool.soldocgen]
    path = "./docgen"
    clear = true
    run-on-compile = true
    artifacts = "./artifacts"
    compile-command = "npx hardhat compile"

The output path is validated before anything else runs: it must resolve to a
directory strictly inside the project root.
"""

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from soldocgen.errors import ConfigurationError

CONFIG_FILE = "pyproject.toml"
CONFIG_TABLE = "soldocgen"

DEFAULT_OUTPUT_PATH = "./docgen"
DEFAULT_ARTIFACTS_PATH = "./artifacts"
DEFAULT_COMPILE_COMMAND = "npx hardhat compile"


@dataclass
class DocgenConfig:
    """
    Documentation generation options.

    Attributes:
        path: Output directory, relative to the project root
        clear: Delete the output directory before writing
        run_on_compile: Run docgen after a successful compile
        artifacts: Compiled artifacts directory, relative to the project root
        compile_command: External command used by the compile step
    """
    path: str = DEFAULT_OUTPUT_PATH
    clear: bool = False
    run_on_compile: bool = False
    artifacts: str = DEFAULT_ARTIFACTS_PATH
    compile_command: str = DEFAULT_COMPILE_COMMAND

    def with_overrides(self, **overrides: Any) -> "DocgenConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def _field_types() -> dict[str, type]:
    return {f.name: type(f.default) for f in fields(DocgenConfig)}


def config_from_table(table: dict[str, Any]) -> DocgenConfig:
    """
    Build a DocgenConfig from a parsed [tool.soldocgen] table.

    Keys may use dashes or underscores ("run-on-compile" or "run_on_compile").

    Raises:
        ConfigurationError: On unknown keys or values of the wrong type
    """
    field_types = _field_types()
    values: dict[str, Any] = {}

    for key, value in table.items():
        field_name = key.replace("-", "_")
        if field_name not in field_types:
            raise ConfigurationError(f"Unknown soldocgen option: {key}")
        expected = field_types[field_name]
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"Option {key} must be a {expected.__name__}, got {type(value).__name__}"
            )
        values[field_name] = value

    return DocgenConfig(**values)


def load_config(root: str | Path) -> DocgenConfig:
    """
    Load options for the project at root.

    A missing pyproject.toml or a missing [tool.soldocgen] table yields the
    defaults.

    Raises:
        ConfigurationError: If pyproject.toml cannot be parsed or the table
            is invalid
    """
    config_path = Path(root) / CONFIG_FILE
    if not config_path.exists():
        return DocgenConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e

    table = data.get("tool", {}).get(CONFIG_TABLE)
    if table is None:
        return DocgenConfig()
    if not isinstance(table, dict):
        raise ConfigurationError(f"[tool.{CONFIG_TABLE}] must be a table")

    return config_from_table(table)


def resolve_output_directory(root: str | Path, path: Optional[str | Path] = None) -> Path:
    """
    Resolve the output directory and check it against the project root.

    Args:
        root: Project root directory
        path: Output path, relative to root (absolute paths are allowed but
            must still land inside root)

    Returns:
        The absolute output directory

    Raises:
        ConfigurationError: If the directory is outside root or is root itself
    """
    root_path = Path(root).resolve()
    output_directory = (root_path / (path if path is not None else DEFAULT_OUTPUT_PATH)).resolve()

    if not output_directory.is_relative_to(root_path):
        raise ConfigurationError("resolved path must be inside of project directory")

    if output_directory == root_path:
        raise ConfigurationError("resolved path must not be root directory")

    return output_directory
