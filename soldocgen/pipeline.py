"""
soldocgen Pipeline

Runs a full documentation pass for one project:
configuration check -> artifact reading -> resolving -> bundle output.

The output directory is validated before anything is read, and the old
bundle is only cleared once every contract has been resolved, so a failed
run leaves the previous bundle in place.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from soldocgen.artifacts import ArtifactStore
from soldocgen.config import DocgenConfig, resolve_output_directory
from soldocgen.errors import BundleError
from soldocgen.renderer import RenderOptions, render_bundle
from soldocgen.resolver import ContractSource, resolve_all
from soldocgen.schema import ContractDoc


@dataclass
class DocgenResult:
    """
    Outcome of one documentation run.

    Attributes:
        output_directory: Where the bundle was written
        docs: Resolved docs keyed by fully-qualified contract name
        written: Files written to the bundle
        warnings: Non-fatal notes from reading and resolving
    """
    output_directory: Path
    docs: dict[str, ContractDoc] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def clear_output_directory(output_directory: Path) -> None:
    """Recursively delete the output directory; a missing one is fine."""
    if not output_directory.exists():
        return
    try:
        shutil.rmtree(output_directory)
    except OSError as e:
        raise BundleError(f"Could not clear {output_directory}: {e}") from e


def run_docgen(
    root: str | Path,
    config: Optional[DocgenConfig] = None,
    store: Optional[ContractSource] = None,
    options: Optional[RenderOptions] = None,
    strict: bool = False,
) -> DocgenResult:
    """
    Generate the documentation bundle for the project at root.

    Args:
        root: Project root directory
        config: Options (defaults if not provided)
        store: Contract source (default: ArtifactStore over config.artifacts)
        options: Bundle rendering options
        strict: Fail on duplicate ABI signatures

    Returns:
        DocgenResult describing what was written

    Raises:
        ConfigurationError: Output path escapes or equals the root
        ArtifactError: Compiler output missing or malformed
        BundleError: Bundle could not be written
    """
    config = config or DocgenConfig()
    root_path = Path(root).resolve()

    output_directory = resolve_output_directory(root_path, config.path)

    if store is None:
        store = ArtifactStore(root_path / config.artifacts)

    result = DocgenResult(output_directory=output_directory)
    result.docs = resolve_all(store, strict=strict)

    result.warnings.extend(getattr(store, "warnings", []))
    for doc in result.docs.values():
        result.warnings.extend(doc.warnings)

    if config.clear:
        clear_output_directory(output_directory)

    result.written = render_bundle(result.docs, output_directory, options)
    return result
