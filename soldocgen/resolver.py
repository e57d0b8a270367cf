"""
Member Resolver

Turns one contract's compiler output (ABI + devdoc + userdoc) into a
ContractDoc. This is the core of soldocgen; everything else reads inputs for
it or writes its results.

Resolution Steps:
    1. Index the ABI by signature (see soldocgen.signatures)
    2. Merge annotation maps onto the indexed members, in a fixed order so
       later sources win on field collisions:
           devdoc.events
           devdoc.stateVariables   (key "<name>()", type -> "stateVariable")
           devdoc.methods
           userdoc.events
           userdoc.methods
    3. Group members by their "type"
    4. Pull out constructor/fallback/receive and copy top-level docs

Lookup Semantics:
    An annotation whose signature is not in the ABI index is merged into a
    throwaway record and so silently dropped. State variables are the one
    exception: a devdoc entry for a variable without a public getter still
    produces a synthetic "stateVariable" record, since that is the only place
    such a variable's documentation can live.

    solc keys constructor docs in "methods" as plain "constructor"; that key
    is looked up as the ABI's "constructor(...)" signature.
"""

import json
from typing import Any, Iterable, Optional, Protocol

from soldocgen.errors import ArtifactError, DuplicateSignatureError
from soldocgen.schema import ContractDoc, MemberDoc, MemberKind
from soldocgen.signatures import index_members, member_type

CONTRACT_NAME_SEPARATOR = ":"
CONSTRUCTOR_KEY = "constructor"
CONSTRUCTOR_PREFIX = "constructor("


class ContractSource(Protocol):
    """Anything that can enumerate contracts and fetch their compiler output."""

    def get_all_fully_qualified_names(self) -> list[str]: ...

    def get_contract_output(self, fully_qualified_name: str) -> dict[str, Any]: ...


def lookup_or_default(members: dict[str, MemberDoc], key: str) -> MemberDoc:
    """
    Return the record stored under key, or a fresh empty one.

    The empty record is not inserted, so anything written to it is discarded.
    """
    record = members.get(key)
    if record is None:
        return {}
    return record


def _merge_section(
    members: dict[str, MemberDoc],
    section: Optional[dict[str, dict[str, Any]]],
) -> None:
    for signature, annotation in (section or {}).items():
        lookup_or_default(members, signature).update(annotation)


def _merge_state_variables(
    members: dict[str, MemberDoc],
    state_variables: Optional[dict[str, dict[str, Any]]],
) -> None:
    for name, annotation in (state_variables or {}).items():
        key = f"{name}()"
        record = members.setdefault(key, {})
        record.update(annotation)
        record["type"] = MemberKind.STATE_VARIABLE.value


def _find_constructor_signature(members: dict[str, MemberDoc]) -> Optional[str]:
    for signature in members:
        if signature.startswith(CONSTRUCTOR_PREFIX):
            return signature
    return None


def _alias_constructor(
    members: dict[str, MemberDoc],
    methods: Optional[dict[str, dict[str, Any]]],
) -> Optional[dict[str, dict[str, Any]]]:
    # solc keys constructor docs as plain "constructor", with no parameter list
    if not methods or CONSTRUCTOR_KEY not in methods:
        return methods
    signature = _find_constructor_signature(members)
    if signature is None:
        return methods
    return {
        (signature if key == CONSTRUCTOR_KEY else key): annotation
        for key, annotation in methods.items()
    }


def merge_annotations(
    members: dict[str, MemberDoc],
    devdoc: Optional[dict[str, Any]] = None,
    userdoc: Optional[dict[str, Any]] = None,
) -> dict[str, MemberDoc]:
    """
    Shallow-merge devdoc/userdoc entries into the indexed members.

    Members are updated in place and the same mapping is returned. Running
    the merge twice with the same trees gives the same result.

    Args:
        members: Signature -> member record, from index_members()
        devdoc: The contract's devdoc tree (None is treated as empty)
        userdoc: The contract's userdoc tree (None is treated as empty)

    Returns:
        The updated members mapping
    """
    devdoc = devdoc or {}
    userdoc = userdoc or {}

    _merge_section(members, devdoc.get("events"))
    _merge_state_variables(members, devdoc.get("stateVariables"))
    _merge_section(members, _alias_constructor(members, devdoc.get("methods")))
    _merge_section(members, userdoc.get("events"))
    _merge_section(members, _alias_constructor(members, userdoc.get("methods")))

    return members


def group_members(members: dict[str, MemberDoc]) -> dict[str, dict[str, MemberDoc]]:
    """Partition members by their "type", keeping signature keys."""
    groups: dict[str, dict[str, MemberDoc]] = {}
    for signature, record in members.items():
        groups.setdefault(member_type(record), {})[signature] = record
    return groups


def split_contract_name(fully_qualified_name: str) -> tuple[str, str]:
    """
    Split "<sourcePath>:<contractName>" on the first separator.

    Raises:
        ArtifactError: If the identifier has no separator
    """
    source, separator, name = fully_qualified_name.partition(CONTRACT_NAME_SEPARATOR)
    if not separator:
        raise ArtifactError(
            f"Not a fully-qualified contract name: {fully_qualified_name!r}"
        )
    return source, name


def _find_constructor(members: dict[str, MemberDoc]) -> Optional[MemberDoc]:
    signature = _find_constructor_signature(members)
    return members[signature] if signature is not None else None


def natspec_trees(
    fully_qualified_name: str,
    contract_output: dict[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Return the (devdoc, userdoc) trees of one contract.

    Top-level "devdoc"/"userdoc" are used when present. Otherwise they are
    read from the "metadata" output, a JSON string that solc always emits
    and whose "output" section carries both trees. This covers builds that
    never asked for devdoc/userdoc in their output selection.

    Raises:
        ArtifactError: If metadata is needed but is not valid JSON
    """
    devdoc = contract_output.get("devdoc")
    userdoc = contract_output.get("userdoc")
    metadata = contract_output.get("metadata")

    if (devdoc is None or userdoc is None) and metadata:
        if isinstance(metadata, str):
            try:
                metadata = json.loads(metadata)
            except json.JSONDecodeError as e:
                raise ArtifactError(
                    f"Invalid metadata JSON for {fully_qualified_name}: {e}"
                ) from e
        if not isinstance(metadata, dict):
            raise ArtifactError(f"Invalid metadata for {fully_qualified_name}")
        metadata_output = metadata.get("output") or {}
        if devdoc is None:
            devdoc = metadata_output.get("devdoc")
        if userdoc is None:
            userdoc = metadata_output.get("userdoc")

    return devdoc or {}, userdoc or {}


def resolve_contract(
    fully_qualified_name: str,
    contract_output: dict[str, Any],
    strict: bool = False,
) -> ContractDoc:
    """
    Resolve one contract's compiler output into a ContractDoc.

    Args:
        fully_qualified_name: "<sourcePath>:<contractName>"
        contract_output: The compiler's per-contract output, with "abi" and
            optionally "devdoc", "userdoc" and "metadata"
        strict: Raise on duplicate signatures instead of keeping the later
            ABI entry

    Returns:
        The resolved ContractDoc

    Raises:
        ArtifactError: If the output has no ABI or the name is malformed
        DuplicateSignatureError: In strict mode, if two members collide
    """
    source, name = split_contract_name(fully_qualified_name)

    abi = contract_output.get("abi")
    if abi is None:
        raise ArtifactError(f"Compiler output for {fully_qualified_name} has no ABI")

    devdoc, userdoc = natspec_trees(fully_qualified_name, contract_output)

    duplicates: list[str] = []
    members = index_members(abi, duplicates=duplicates)
    if duplicates and strict:
        raise DuplicateSignatureError(
            f"Duplicate signatures in {fully_qualified_name}: {', '.join(duplicates)}"
        )

    merge_annotations(members, devdoc, userdoc)
    groups = group_members(members)

    doc = ContractDoc(
        source=source,
        name=name,
        title=devdoc.get("title"),
        author=devdoc.get("author"),
        details=devdoc.get("details"),
        notice=userdoc.get("notice"),
        constructor=_find_constructor(members),
        fallback=members.get("fallback()"),
        receive=members.get("receive()"),
        events=groups.get(MemberKind.EVENT.value),
        state_variables=groups.get(MemberKind.STATE_VARIABLE.value),
        methods=groups.get(MemberKind.FUNCTION.value),
    )
    for signature in duplicates:
        doc.warnings.append(
            f"{fully_qualified_name}: duplicate signature {signature}, later ABI entry kept"
        )
    return doc


def resolve_all(
    store: ContractSource,
    strict: bool = False,
    names: Optional[Iterable[str]] = None,
) -> dict[str, ContractDoc]:
    """
    Resolve every contract the store knows about.

    Any failure aborts the whole run; documentation coverage is all or
    nothing.

    Args:
        store: Source of contract identifiers and compiler output
        strict: Passed through to resolve_contract()
        names: Restrict to these identifiers (default: all of them)

    Returns:
        Mapping of fully-qualified name -> ContractDoc
    """
    if names is None:
        names = store.get_all_fully_qualified_names()

    docs: dict[str, ContractDoc] = {}
    for contract_name in names:
        output = store.get_contract_output(contract_name)
        docs[contract_name] = resolve_contract(contract_name, output, strict=strict)
    return docs
