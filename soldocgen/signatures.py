"""
ABI Signature Derivation

Builds the canonical "name(type,type,...)" signature for every member of a
contract ABI. The compiler keys devdoc/userdoc entries by this same external
signature, so these keys are what annotation merging looks up.

Derivation Rules:
    - A parameter whose type does not contain "tuple" is used as-is
    - "tuple" is replaced by the parenthesized, comma-joined signature of its
      components, recursively; array suffixes such as "[]" or "[3]" stay
      in place after the closing parenthesis
    - Members without a name (constructor, fallback, receive) use their
      ABI type as the name
    - An entry without a "type" is a function

Examples:
    uint256                                  -> uint256
    tuple(uint256, address)                  -> (uint256,address)
    tuple[] of tuple(uint8[2])               -> ((uint8[2]))[]
    function get(tuple(uint256,address))     -> get((uint256,address))
    constructor(address)                     -> constructor(address)
"""

from typing import Any, Iterable, Optional

from soldocgen.schema import MemberDoc

TUPLE_TYPE = "tuple"
DEFAULT_MEMBER_TYPE = "function"


def derive_type(param: dict[str, Any]) -> str:
    """
    Produce the canonical type string of one ABI parameter descriptor.

    Args:
        param: ABI parameter with a "type" and, for tuples, "components"

    Returns:
        The type with any "tuple" expanded to its component signature
    """
    param_type = param["type"]
    if TUPLE_TYPE not in param_type:
        return param_type

    components = param.get("components") or []
    expanded = "(" + ",".join(derive_type(c) for c in components) + ")"
    return param_type.replace(TUPLE_TYPE, expanded, 1)


def member_type(member: dict[str, Any]) -> str:
    """ABI member type; an omitted "type" means "function"."""
    return member.get("type") or DEFAULT_MEMBER_TYPE


def member_name(member: dict[str, Any]) -> str:
    """Declared name, or the ABI type for constructor/fallback/receive."""
    return member.get("name") or member_type(member)


def member_signature(member: dict[str, Any]) -> str:
    """
    Build the signature key of one ABI member.

    Events use their "inputs" just like functions; outputs never take part.
    """
    inputs = member.get("inputs") or []
    return f"{member_name(member)}({','.join(derive_type(p) for p in inputs)})"


def index_members(
    abi: Iterable[dict[str, Any]],
    duplicates: Optional[list[str]] = None,
) -> dict[str, MemberDoc]:
    """
    Map every ABI member to its signature key.

    Each value is a shallow copy of the ABI entry, so later merging never
    touches the caller's compiler output. When two members produce the same
    key the later one wins.

    Args:
        abi: The contract's ABI array
        duplicates: If given, every overwritten key is appended to it

    Returns:
        Ordered mapping of signature -> member record
    """
    members: dict[str, MemberDoc] = {}
    for entry in abi:
        signature = member_signature(entry)
        if signature in members and duplicates is not None:
            duplicates.append(signature)
        members[signature] = dict(entry)
    return members
