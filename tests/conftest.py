"""Pytest configuration and fixtures for soldocgen tests."""

import json
from pathlib import Path

import pytest


TOKEN_ABI = [
    {
        "type": "constructor",
        "inputs": [{"name": "owner", "type": "address"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "totalSupply",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "event",
        "name": "Transfer",
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
        "anonymous": False,
    },
    {"type": "fallback", "stateMutability": "payable"},
    {"type": "receive", "stateMutability": "payable"},
]

TOKEN_DEVDOC = {
    "title": "Example token",
    "author": "Token Team",
    "details": "Minimal ERC20-like token",
    "kind": "dev",
    "version": 1,
    "methods": {
        "transfer(address,uint256)": {
            "details": "Moves tokens from the caller",
            "params": {"to": "recipient", "amount": "token amount"},
            "returns": {"_0": "true on success"},
        },
        "burn(uint256)": {"details": "not in the ABI"},
    },
    "events": {
        "Transfer(address,address,uint256)": {"details": "Emitted on every transfer"},
    },
    "stateVariables": {
        "totalSupply": {"details": "Sum of all balances"},
        "secret": {"details": "Private, no getter"},
    },
}

TOKEN_USERDOC = {
    "kind": "user",
    "version": 1,
    "notice": "A token for examples",
    "methods": {
        "transfer(address,uint256)": {"notice": "Send tokens"},
    },
    "events": {
        "Transfer(address,address,uint256)": {"notice": "Tokens moved"},
    },
}


@pytest.fixture
def token_abi():
    """A fresh copy of the example token ABI."""
    return json.loads(json.dumps(TOKEN_ABI))


@pytest.fixture
def token_output(token_abi):
    """Compiler output for the example token."""
    return {
        "abi": token_abi,
        "devdoc": json.loads(json.dumps(TOKEN_DEVDOC)),
        "userdoc": json.loads(json.dumps(TOKEN_USERDOC)),
    }


def write_artifacts(artifacts_dir: Path, contracts: dict, build_id: str = "abc123") -> Path:
    """
    Write a Hardhat-style artifacts tree.

    Args:
        artifacts_dir: Directory to create
        contracts: {source_name: {contract_name: compiler_output}}
        build_id: Name of the build-info file

    Returns:
        Path to the build-info file
    """
    build_info_dir = artifacts_dir / "build-info"
    build_info_dir.mkdir(parents=True, exist_ok=True)
    build_info_path = build_info_dir / f"{build_id}.json"
    build_info_path.write_text(
        json.dumps({"id": build_id, "output": {"contracts": contracts}}),
        encoding="utf-8",
    )

    for source_name, outputs in contracts.items():
        source_dir = artifacts_dir / source_name
        source_dir.mkdir(parents=True, exist_ok=True)
        depth = len(Path(source_name).parts)
        for contract_name, output in outputs.items():
            artifact = {
                "_format": "hh-sol-artifact-1",
                "contractName": contract_name,
                "sourceName": source_name,
                "abi": output.get("abi", []),
            }
            (source_dir / f"{contract_name}.json").write_text(
                json.dumps(artifact), encoding="utf-8"
            )
            relative = "/".join([".."] * depth + ["build-info", f"{build_id}.json"])
            (source_dir / f"{contract_name}.dbg.json").write_text(
                json.dumps({"_format": "hh-sol-dbg-1", "buildInfo": relative}),
                encoding="utf-8",
            )

    return build_info_path


@pytest.fixture
def hardhat_project(tmp_path, token_output):
    """A project root with compiled artifacts for two contracts."""
    write_artifacts(
        tmp_path / "artifacts",
        {
            "contracts/Token.sol": {"Token": token_output},
            "contracts/lib/Math.sol": {
                "Math": {"abi": [], "devdoc": {"title": "Math helpers"}},
            },
        },
    )
    return tmp_path
