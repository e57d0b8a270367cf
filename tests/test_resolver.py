"""
Tests for soldocgen.resolver module.

Tests annotation merging, grouping and ContractDoc assembly.
"""

import copy
import json

import pytest

from soldocgen.errors import ArtifactError, DuplicateSignatureError
from soldocgen.resolver import (
    group_members,
    lookup_or_default,
    merge_annotations,
    natspec_trees,
    resolve_all,
    resolve_contract,
    split_contract_name,
)
from soldocgen.signatures import index_members


class TestLookupOrDefault:
    """Tests for lookup_or_default()."""

    def test_hit_returns_stored_record(self):
        """A present key returns the very record stored."""
        record = {"type": "function"}
        members = {"f()": record}

        assert lookup_or_default(members, "f()") is record

    def test_miss_returns_throwaway(self):
        """A missing key returns a fresh record that is not stored."""
        members = {}
        record = lookup_or_default(members, "g()")
        record["details"] = "lost"

        assert record == {"details": "lost"}
        assert members == {}


class TestMergeAnnotations:
    """Tests for merge_annotations()."""

    def test_method_annotations_merged(self, token_output):
        """devdoc and userdoc method entries land on the same record."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        transfer = members["transfer(address,uint256)"]
        assert transfer["type"] == "function"
        assert transfer["details"] == "Moves tokens from the caller"
        assert transfer["notice"] == "Send tokens"
        assert transfer["params"] == {"to": "recipient", "amount": "token amount"}
        assert transfer["returns"] == {"_0": "true on success"}

    def test_event_annotations_merged(self, token_output):
        """Event docs from both trees are merged."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        event = members["Transfer(address,address,uint256)"]
        assert event["details"] == "Emitted on every transfer"
        assert event["notice"] == "Tokens moved"

    def test_unknown_signature_dropped(self, token_output):
        """Annotations for members not in the ABI do not appear."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        assert "burn(uint256)" not in members

    def test_unannotated_member_kept(self, token_output):
        """Members without docs are kept unchanged."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        assert members["balanceOf(address)"] == token_output["abi"][1]

    def test_state_variable_with_getter(self, token_output):
        """A documented public variable takes over its getter record."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        getter = members["totalSupply()"]
        assert getter["type"] == "stateVariable"
        assert getter["details"] == "Sum of all balances"
        assert getter["name"] == "totalSupply"

    def test_state_variable_without_getter(self):
        """A documented variable without a getter gets a synthetic record."""
        members = merge_annotations(
            {},
            devdoc={"stateVariables": {"balance": {"details": "token balance"}}},
        )

        assert members == {"balance()": {"details": "token balance", "type": "stateVariable"}}

    def test_state_variable_type_overrides_annotation(self):
        """The stateVariable type is stamped after the annotation fields."""
        members = merge_annotations(
            {},
            devdoc={"stateVariables": {"x": {"type": "bogus"}}},
        )

        assert members["x()"]["type"] == "stateVariable"

    def test_later_sources_win(self):
        """userdoc.methods overwrites devdoc.methods on the same field."""
        members = {"f()": {"type": "function", "name": "f", "inputs": []}}
        merge_annotations(
            members,
            devdoc={"methods": {"f()": {"notice": "from devdoc"}}},
            userdoc={"methods": {"f()": {"notice": "from userdoc"}}},
        )

        assert members["f()"]["notice"] == "from userdoc"

    def test_idempotent(self, token_output):
        """Merging the same trees twice gives the same result."""
        members = index_members(token_output["abi"])
        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])
        once = copy.deepcopy(members)

        merge_annotations(members, token_output["devdoc"], token_output["userdoc"])

        assert members == once

    def test_bare_constructor_key(self):
        """solc's "constructor" methods key documents the ABI constructor."""
        members = index_members([{"type": "constructor", "inputs": [{"type": "address"}]}])

        merge_annotations(
            members,
            {"methods": {"constructor": {"details": "sets owner"}}},
            {"methods": {"constructor": {"notice": "Deploys"}}},
        )

        assert members["constructor(address)"]["details"] == "sets owner"
        assert members["constructor(address)"]["notice"] == "Deploys"
        assert "constructor" not in members

    def test_bare_constructor_key_without_constructor(self):
        """With no constructor in the ABI the annotation is dropped."""
        members = index_members([{"type": "function", "name": "f", "inputs": []}])

        merge_annotations(members, {"methods": {"constructor": {"details": "x"}}})

        assert list(members) == ["f()"]
        assert "details" not in members["f()"]

    def test_missing_trees(self, token_abi):
        """None trees behave like empty ones."""
        members = index_members(token_abi)
        before = copy.deepcopy(members)

        merge_annotations(members, None, None)

        assert members == before


class TestGroupMembers:
    """Tests for group_members()."""

    def test_groups_by_type(self):
        """Records are grouped by their type field."""
        members = {
            "a()": {"type": "function"},
            "E()": {"type": "event"},
            "b()": {"type": "function"},
            "v()": {"type": "stateVariable"},
        }
        groups = group_members(members)

        assert list(groups["function"]) == ["a()", "b()"]
        assert list(groups["event"]) == ["E()"]
        assert list(groups["stateVariable"]) == ["v()"]

    def test_missing_type_grouped_as_function(self):
        """Records without a type land in the function group."""
        groups = group_members({"f()": {"name": "f"}, "g()": {"type": "function"}})

        assert list(groups) == ["function"]
        assert list(groups["function"]) == ["f()", "g()"]


class TestNatspecTrees:
    """Tests for natspec_trees()."""

    METADATA = {
        "output": {
            "abi": [],
            "devdoc": {"title": "From metadata", "methods": {}},
            "userdoc": {"notice": "Metadata notice"},
        },
    }

    def test_top_level_trees(self, token_output):
        """Top-level devdoc/userdoc are returned as-is."""
        devdoc, userdoc = natspec_trees("a.sol:A", token_output)

        assert devdoc is token_output["devdoc"]
        assert userdoc is token_output["userdoc"]

    def test_metadata_fallback(self):
        """Without top-level trees they are read from the metadata string."""
        output = {"abi": [], "metadata": json.dumps(self.METADATA)}
        devdoc, userdoc = natspec_trees("a.sol:A", output)

        assert devdoc["title"] == "From metadata"
        assert userdoc == {"notice": "Metadata notice"}

    def test_metadata_as_object(self):
        """Already-parsed metadata is accepted too."""
        devdoc, _ = natspec_trees("a.sol:A", {"abi": [], "metadata": self.METADATA})

        assert devdoc["title"] == "From metadata"

    def test_top_level_wins_over_metadata(self):
        """A top-level tree takes precedence; only the missing one falls back."""
        output = {
            "abi": [],
            "devdoc": {"title": "Top level"},
            "metadata": json.dumps(self.METADATA),
        }
        devdoc, userdoc = natspec_trees("a.sol:A", output)

        assert devdoc == {"title": "Top level"}
        assert userdoc == {"notice": "Metadata notice"}

    def test_neither_present(self):
        """No trees and no metadata give empty trees."""
        assert natspec_trees("a.sol:A", {"abi": []}) == ({}, {})

    def test_invalid_metadata(self):
        """Unparseable metadata is an artifact error."""
        with pytest.raises(ArtifactError, match="a.sol:A"):
            natspec_trees("a.sol:A", {"abi": [], "metadata": "{not json"})


class TestSplitContractName:
    """Tests for split_contract_name()."""

    def test_split(self):
        """Source path and name are separated."""
        assert split_contract_name("contracts/Token.sol:Token") == ("contracts/Token.sol", "Token")

    def test_split_on_first_separator(self):
        """Only the first separator splits."""
        assert split_contract_name("a.sol:B:C") == ("a.sol", "B:C")

    def test_no_separator(self):
        """An identifier without a separator is rejected."""
        with pytest.raises(ArtifactError):
            split_contract_name("Token")


class TestResolveContract:
    """Tests for resolve_contract()."""

    def test_full_contract(self, token_output):
        """All parts of the ContractDoc are filled in."""
        doc = resolve_contract("contracts/Token.sol:Token", token_output)

        assert doc.source == "contracts/Token.sol"
        assert doc.name == "Token"
        assert doc.title == "Example token"
        assert doc.author == "Token Team"
        assert doc.details == "Minimal ERC20-like token"
        assert doc.notice == "A token for examples"

        assert doc.constructor["inputs"] == [{"name": "owner", "type": "address"}]
        assert doc.fallback["type"] == "fallback"
        assert doc.receive["type"] == "receive"

        assert set(doc.methods) == {"balanceOf(address)", "transfer(address,uint256)"}
        assert set(doc.events) == {"Transfer(address,address,uint256)"}
        assert set(doc.state_variables) == {"totalSupply()", "secret()"}
        assert doc.warnings == []

    def test_special_members_also_grouped(self, token_output):
        """Constructor, fallback and receive keep their own groups by type."""
        doc = resolve_contract("contracts/Token.sol:Token", token_output)

        assert doc.constructor["type"] == "constructor"
        assert "constructor(address)" not in (doc.methods or {})

    def test_missing_groups_are_none(self):
        """Groups with no members are None."""
        doc = resolve_contract("a.sol:A", {"abi": []})

        assert doc.events is None
        assert doc.methods is None
        assert doc.state_variables is None
        assert doc.constructor is None
        assert doc.fallback is None
        assert doc.receive is None

    def test_state_variable_example(self):
        """A devdoc-only state variable shows up in the stateVariables group."""
        doc = resolve_contract(
            "a.sol:A",
            {"abi": [], "devdoc": {"stateVariables": {"balance": {"details": "token balance"}}}},
        )

        assert doc.state_variables == {
            "balance()": {"type": "stateVariable", "details": "token balance"},
        }

    def test_missing_abi(self):
        """Output without an ABI aborts."""
        with pytest.raises(ArtifactError):
            resolve_contract("a.sol:A", {"devdoc": {}})

    def test_null_docs(self):
        """Null devdoc/userdoc are treated as empty."""
        doc = resolve_contract("a.sol:A", {"abi": [], "devdoc": None, "userdoc": None})

        assert doc.title is None
        assert doc.notice is None

    def test_untyped_abi_entry_is_method(self):
        """An ABI entry without "type" resolves as a method."""
        doc = resolve_contract("a.sol:A", {"abi": [{"name": "f", "inputs": []}]})

        assert list(doc.methods) == ["f()"]

    def test_constructor_docs_from_bare_key(self):
        """Constructor NatSpec under solc's "constructor" key is resolved."""
        output = {
            "abi": [{"type": "constructor", "inputs": [{"type": "address", "name": "owner"}]}],
            "devdoc": {"methods": {"constructor": {"details": "sets owner"}}},
        }
        doc = resolve_contract("a.sol:A", output)

        assert doc.constructor["details"] == "sets owner"

    def test_docs_from_metadata_only(self):
        """Output holding only abi and metadata still resolves NatSpec."""
        metadata = {
            "output": {
                "devdoc": {"title": "T", "methods": {"f()": {"details": "d"}}},
                "userdoc": {"notice": "N"},
            },
        }
        output = {
            "abi": [{"type": "function", "name": "f", "inputs": []}],
            "metadata": json.dumps(metadata),
        }
        doc = resolve_contract("a.sol:A", output)

        assert doc.title == "T"
        assert doc.notice == "N"
        assert doc.methods["f()"]["details"] == "d"

    def test_input_not_mutated(self, token_output):
        """Resolving leaves the compiler output untouched."""
        before = copy.deepcopy(token_output)
        resolve_contract("contracts/Token.sol:Token", token_output)

        assert token_output == before

    def test_duplicates_warned(self):
        """Duplicate signatures are kept last-write-wins with a warning."""
        abi = [
            {"type": "function", "name": "f", "inputs": [], "stateMutability": "view"},
            {"type": "function", "name": "f", "inputs": [], "stateMutability": "pure"},
        ]
        doc = resolve_contract("a.sol:A", {"abi": abi})

        assert doc.methods["f()"]["stateMutability"] == "pure"
        assert len(doc.warnings) == 1
        assert "f()" in doc.warnings[0]

    def test_duplicates_strict(self):
        """Strict mode rejects duplicate signatures."""
        abi = [
            {"type": "function", "name": "f", "inputs": []},
            {"type": "function", "name": "f", "inputs": []},
        ]
        with pytest.raises(DuplicateSignatureError):
            resolve_contract("a.sol:A", {"abi": abi}, strict=True)


class FakeStore:
    """In-memory contract source."""

    def __init__(self, outputs):
        self.outputs = outputs
        self.requested = []

    def get_all_fully_qualified_names(self):
        return list(self.outputs)

    def get_contract_output(self, fully_qualified_name):
        self.requested.append(fully_qualified_name)
        return self.outputs[fully_qualified_name]


class TestResolveAll:
    """Tests for resolve_all()."""

    def test_resolves_every_contract(self, token_output):
        """One ContractDoc per identifier."""
        store = FakeStore({"t.sol:Token": token_output, "m.sol:Math": {"abi": []}})
        docs = resolve_all(store)

        assert set(docs) == {"t.sol:Token", "m.sol:Math"}
        assert docs["m.sol:Math"].name == "Math"

    def test_restrict_names(self, token_output):
        """Only the requested identifiers are fetched."""
        store = FakeStore({"t.sol:Token": token_output, "m.sol:Math": {"abi": []}})
        docs = resolve_all(store, names=["m.sol:Math"])

        assert list(docs) == ["m.sol:Math"]
        assert store.requested == ["m.sol:Math"]

    def test_one_bad_contract_fails_run(self, token_output):
        """A contract without ABI aborts the whole run."""
        store = FakeStore({"t.sol:Token": token_output, "bad.sol:Bad": {}})

        with pytest.raises(ArtifactError):
            resolve_all(store)
