"""
soldocgen Documentation Schema

This module defines the data structures produced by the member resolver and
consumed by the bundle renderer. One ContractDoc is built per fully-qualified
contract identifier on every run; nothing here is persisted between runs.

Design Principles:
    1. Member records stay plain dictionaries: ABI fields and NatSpec fields
       are opaque pass-through data, merged key by key
    2. Groups are keyed by signature, so a record can always be traced back
       to the ABI entry it came from
    3. Missing data is None, never a placeholder string
    4. Serialized form matches what a front-end expects (camelCase keys)

Record Shapes:
    MemberDoc       - dict: ABI member + devdoc/userdoc fields, with "type"
    ContractDoc     - one contract: metadata, top-level docs, special
                      members and the three signature-keyed groups
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# A resolved member: the ABI entry merged with its annotation fields.
MemberDoc = dict[str, Any]


class MemberKind(Enum):
    """
    Kinds of ABI members, as found in the ABI "type" field.

    STATE_VARIABLE never appears in an ABI; it is stamped onto records that
    were matched by a devdoc stateVariables entry.
    """
    FUNCTION = "function"
    EVENT = "event"
    CONSTRUCTOR = "constructor"
    FALLBACK = "fallback"
    RECEIVE = "receive"
    STATE_VARIABLE = "stateVariable"

    def __str__(self) -> str:
        return self.value


@dataclass
class ContractDoc:
    """
    Documentation for a single contract.

    Attributes:
        source: Source file path (part before ":" in the identifier)
        name: Contract name (part after ":")
        title: devdoc @title
        author: devdoc @author
        details: devdoc @dev on the contract
        notice: userdoc @notice on the contract
        constructor: Resolved constructor record, if the ABI has one
        fallback: Resolved fallback record, if any
        receive: Resolved receive record, if any
        events: Event records keyed by signature (None if there are none)
        state_variables: State variable records keyed by "<name>()"
        methods: Function records keyed by signature
        warnings: Non-fatal notes collected while resolving

    Example:
        >>> doc = ContractDoc(source="contracts/Token.sol", name="Token")
        >>> doc.fully_qualified_name
        'contracts/Token.sol:Token'
    """
    source: str
    name: str

    # === Top-level docs ===
    title: Optional[str] = None
    author: Optional[str] = None
    details: Optional[str] = None
    notice: Optional[str] = None

    # === Special functions ===
    constructor: Optional[MemberDoc] = None
    fallback: Optional[MemberDoc] = None
    receive: Optional[MemberDoc] = None

    # === Grouped members ===
    events: Optional[dict[str, MemberDoc]] = None
    state_variables: Optional[dict[str, MemberDoc]] = None
    methods: Optional[dict[str, MemberDoc]] = None

    warnings: list[str] = field(default_factory=list)

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source}:{self.name}"

    def member_count(self) -> int:
        """Number of grouped members plus special functions present."""
        count = sum(
            len(group) for group in (self.events, self.state_variables, self.methods)
            if group
        )
        count += sum(
            1 for special in (self.constructor, self.fallback, self.receive)
            if special is not None
        )
        return count

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the serialized record handed to the renderer.

        Warnings are reporting data and are not part of the record.
        """
        return {
            # metadata
            "source": self.source,
            "name": self.name,
            # top-level docs
            "title": self.title,
            "author": self.author,
            "details": self.details,
            "notice": self.notice,
            # special functions
            "constructor": self.constructor,
            "fallback": self.fallback,
            "receive": self.receive,
            # docs
            "events": self.events,
            "stateVariables": self.state_variables,
            "methods": self.methods,
        }


def docs_to_dict(docs: dict[str, ContractDoc]) -> dict[str, dict[str, Any]]:
    """Serialize a whole result mapping keyed by fully-qualified name."""
    return {contract_name: doc.to_dict() for contract_name, doc in docs.items()}
