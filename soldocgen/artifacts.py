"""
soldocgen Artifact Store

This module reads a Hardhat-style artifacts directory: it enumerates every
compiled contract and fetches each contract's compiler output from the
build-info file the contract was produced by.

Directory Layout:
    artifacts/
        build-info/<id>.json               full compiler input + output
        <sourceName>/<ContractName>.json     contract artifact
        <sourceName>/<ContractName>.dbg.json points at its build-info file

Key Responsibilities:
    1. Walk the artifacts tree and collect "<sourceName>:<contractName>"
       identifiers from contract artifacts
    2. Follow the .dbg.json pointer to the build-info file
    3. Return the per-contract compiler output (abi, devdoc, userdoc, ...)

Design Notes:
    - Every read failure raises ArtifactError; a documentation run either
      covers every contract or fails
    - JSON files that are not contract artifacts are skipped and noted in
      warnings
    - Symlinks are not followed to avoid cycles
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from soldocgen.errors import ArtifactError
from soldocgen.resolver import split_contract_name

BUILD_INFO_DIR = "build-info"
DEBUG_SUFFIX = ".dbg.json"


@dataclass
class ContractArtifact:
    """
    A contract artifact found in the artifacts directory.

    Attributes:
        path: Absolute path to the artifact JSON file
        source_name: Source file the contract was declared in
        contract_name: The contract's name
    """
    path: Path
    source_name: str
    contract_name: str

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    @property
    def debug_path(self) -> Path:
        return self.path.with_name(f"{self.contract_name}{DEBUG_SUFFIX}")

    def __str__(self) -> str:
        return self.fully_qualified_name


def read_json(path: Path) -> Any:
    """
    Load a JSON file.

    Raises:
        ArtifactError: If the file is missing, unreadable or not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ArtifactError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ArtifactError(f"Could not read {path}: {e}") from e


class ArtifactStore:
    """
    Read access to compiled contracts in an artifacts directory.

    Usage:
        store = ArtifactStore("/path/to/project/artifacts")
        for contract_name in store.get_all_fully_qualified_names():
            output = store.get_contract_output(contract_name)
            print(contract_name, len(output["abi"]))

    Attributes:
        artifacts_dir: The artifacts directory being read
        warnings: Non-fatal notes from the last directory walk
    """

    def __init__(self, artifacts_dir: str | Path):
        """
        Initialize the store.

        Args:
            artifacts_dir: Path to the artifacts directory

        Raises:
            ArtifactError: If the directory does not exist
        """
        self.artifacts_dir = Path(artifacts_dir).resolve()
        self.warnings: list[str] = []

        if not self.artifacts_dir.exists():
            raise ArtifactError(
                f"Artifacts directory does not exist: {self.artifacts_dir} "
                "(compile the project first)"
            )
        if not self.artifacts_dir.is_dir():
            raise ArtifactError(f"Artifacts path is not a directory: {self.artifacts_dir}")

    def _load_artifact(self, path: Path) -> ContractArtifact | None:
        data = read_json(path)
        if not isinstance(data, dict):
            return None
        source_name = data.get("sourceName")
        contract_name = data.get("contractName")
        if not isinstance(source_name, str) or not isinstance(contract_name, str):
            return None
        return ContractArtifact(path=path, source_name=source_name, contract_name=contract_name)

    def find_artifacts(self) -> list[ContractArtifact]:
        """
        Walk the artifacts directory and collect every contract artifact.

        Returns:
            Artifacts sorted by fully-qualified name
        """
        self.warnings = []
        artifacts: list[ContractArtifact] = []

        for dirpath, dirnames, filenames in os.walk(self.artifacts_dir):
            current_dir = Path(dirpath)

            # build-info only lives at the top level
            if current_dir == self.artifacts_dir and BUILD_INFO_DIR in dirnames:
                dirnames.remove(BUILD_INFO_DIR)

            for filename in filenames:
                if not filename.endswith(".json") or filename.endswith(DEBUG_SUFFIX):
                    continue

                file_path = current_dir / filename
                if file_path.is_symlink():
                    continue

                artifact = self._load_artifact(file_path)
                if artifact is None:
                    relative = file_path.relative_to(self.artifacts_dir)
                    self.warnings.append(f"Not a contract artifact, skipped: {relative}")
                    continue
                artifacts.append(artifact)

        artifacts.sort(key=lambda a: a.fully_qualified_name)
        return artifacts

    def get_all_fully_qualified_names(self) -> list[str]:
        """Sorted "<sourceName>:<contractName>" identifiers of all contracts."""
        return [a.fully_qualified_name for a in self.find_artifacts()]

    def get_build_info(self, fully_qualified_name: str) -> dict[str, Any]:
        """
        Load the build-info file that produced a contract.

        Raises:
            ArtifactError: If the debug file or build-info file is missing
                or malformed
        """
        source_name, contract_name = split_contract_name(fully_qualified_name)
        debug_path = self.artifacts_dir / source_name / f"{contract_name}{DEBUG_SUFFIX}"

        debug_data = read_json(debug_path)
        build_info_ref = debug_data.get("buildInfo") if isinstance(debug_data, dict) else None
        if not isinstance(build_info_ref, str):
            raise ArtifactError(f"No buildInfo reference in {debug_path}")

        build_info = read_json((debug_path.parent / build_info_ref).resolve())
        if not isinstance(build_info, dict):
            raise ArtifactError(f"Malformed build-info for {fully_qualified_name}")
        return build_info

    def get_contract_output(self, fully_qualified_name: str) -> dict[str, Any]:
        """
        Fetch one contract's compiler output from its build-info file.

        Returns:
            The per-contract output (abi, devdoc, userdoc, evm, ...)

        Raises:
            ArtifactError: If the contract is not in the build-info output
        """
        source_name, contract_name = split_contract_name(fully_qualified_name)
        build_info = self.get_build_info(fully_qualified_name)
        return contract_output_from_build_info(build_info, source_name, contract_name)


def contract_output_from_build_info(
    build_info: dict[str, Any],
    source_name: str,
    contract_name: str,
) -> dict[str, Any]:
    """
    Pick one contract's output out of a build-info document.

    Raises:
        ArtifactError: If the contract is missing
    """
    try:
        output = build_info["output"]["contracts"][source_name][contract_name]
    except (KeyError, TypeError) as e:
        raise ArtifactError(
            f"Build info has no output for {source_name}:{contract_name}"
        ) from e
    if not isinstance(output, dict):
        raise ArtifactError(f"Malformed output for {source_name}:{contract_name}")
    return output


class BuildInfoStore:
    """
    Contract source backed by a single in-memory build-info document.

    Used when compiler output arrives directly (for example over the HTTP
    API) instead of through an artifacts directory.
    """

    def __init__(self, build_info: dict[str, Any]):
        output = build_info.get("output") if isinstance(build_info, dict) else None
        contracts = output.get("contracts") if isinstance(output, dict) else None
        if not isinstance(contracts, dict):
            raise ArtifactError("Build info has no output.contracts table")
        self.build_info = build_info
        self._contracts: dict[str, dict[str, Any]] = contracts

    def get_all_fully_qualified_names(self) -> list[str]:
        return sorted(
            f"{source_name}:{contract_name}"
            for source_name, contracts in self._contracts.items()
            for contract_name in contracts
        )

    def get_contract_output(self, fully_qualified_name: str) -> dict[str, Any]:
        source_name, contract_name = split_contract_name(fully_qualified_name)
        return contract_output_from_build_info(self.build_info, source_name, contract_name)
