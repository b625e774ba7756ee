"""
Structured reference expressions.

A CloudFormation value is a tree of literal leaves and reference leaves:

    {"Ref": "Logical"}                       -> Reference("Logical")
    {"Fn::GetAtt": ["Logical", "Attr"]}      -> Reference("Logical", "Attr")
    {"Fn::GetAtt": "Logical.Attr"}           -> Reference("Logical", "Attr")
    {"Fn::Sub": "...${Logical.Attr}..."}     -> Reference("Logical", "Attr") inside a string

`substitute` rebuilds a value with mapped references replaced by concrete values.
Everything else is copied through untouched.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

REF = "Ref"
GET_ATT = "Fn::GetAtt"
SUB = "Fn::Sub"

# ${Name} or ${Name.Attr}; ${!Literal} is an escape and never a reference.
_SUB_PLACEHOLDER = re.compile(r"\$\{([^!}][^}]*)\}")


@dataclass(frozen=True)
class Reference:
    """Identity of a template node, optionally narrowed to one of its attributes."""

    logical_id: str
    attribute: Optional[str] = None

    @classmethod
    def parse(cls, node: Any) -> Optional["Reference"]:
        """Return the reference a value stands for, or None for any other value."""
        if not isinstance(node, dict) or len(node) != 1:
            return None

        if REF in node:
            target = node[REF]
            return cls(target) if isinstance(target, str) else None

        if GET_ATT in node:
            target = node[GET_ATT]
            if isinstance(target, str) and "." in target:
                logical_id, attribute = target.split(".", 1)
                return cls(logical_id, attribute)
            if (
                isinstance(target, list)
                and len(target) == 2
                and all(isinstance(part, str) for part in target)
            ):
                return cls(target[0], target[1])

        return None

    @classmethod
    def from_placeholder(cls, name: str) -> "Reference":
        if "." in name:
            logical_id, attribute = name.split(".", 1)
            return cls(logical_id, attribute)
        return cls(name)

    def __str__(self) -> str:
        if self.attribute:
            return f"{self.logical_id}.{self.attribute}"
        return self.logical_id


def substitute(node: Any, mapping: Mapping[Reference, Any]) -> Any:
    """
    Return a copy of `node` with every reference found in `mapping` replaced.

    Recurses through dicts and lists at any depth, including reference
    expressions nested inside other reference expressions.
    """
    ref = Reference.parse(node)
    if ref is not None and ref in mapping:
        return mapping[ref]

    if isinstance(node, dict):
        if len(node) == 1 and SUB in node:
            return {SUB: _substitute_sub(node[SUB], mapping)}
        return {key: substitute(value, mapping) for key, value in node.items()}

    if isinstance(node, list):
        return [substitute(item, mapping) for item in node]

    return node


def _substitute_sub(value: Any, mapping: Mapping[Reference, Any]) -> Any:
    if isinstance(value, str):
        return _substitute_sub_string(value, mapping, local_names=())

    if isinstance(value, list) and len(value) == 2 and isinstance(value[0], str):
        variables = value[1] if isinstance(value[1], dict) else {}
        return [
            _substitute_sub_string(value[0], mapping, local_names=tuple(variables)),
            substitute(value[1], mapping),
        ]

    return substitute(value, mapping)


def _substitute_sub_string(text: str, mapping: Mapping[Reference, Any], local_names) -> str:
    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in local_names:
            return match.group(0)
        ref = Reference.from_placeholder(name)
        if ref in mapping:
            return str(mapping[ref])
        return match.group(0)

    return _SUB_PLACEHOLDER.sub(replace, text)


def iter_references(node: Any) -> Iterator[Reference]:
    """Yield every reference in `node`, depth first, in document order."""
    ref = Reference.parse(node)
    if ref is not None:
        yield ref
        return

    if isinstance(node, dict):
        if len(node) == 1 and SUB in node:
            yield from _iter_sub_references(node[SUB])
            return
        if len(node) == 1 and GET_ATT in node:
            target = node[GET_ATT]
            if isinstance(target, list) and len(target) == 2 and isinstance(target[0], str):
                # Attribute computed by an intrinsic; the target node is still referenced.
                yield Reference(target[0])
                yield from iter_references(target[1])
                return
        for value in node.values():
            yield from iter_references(value)
    elif isinstance(node, list):
        for item in node:
            yield from iter_references(item)


def _iter_sub_references(value: Any) -> Iterator[Reference]:
    if isinstance(value, str):
        text, variables = value, {}
    elif isinstance(value, list) and len(value) == 2 and isinstance(value[0], str):
        text = value[0]
        variables = value[1] if isinstance(value[1], dict) else {}
        yield from iter_references(value[1])
    else:
        yield from iter_references(value)
        return

    for match in _SUB_PLACEHOLDER.finditer(text):
        name = match.group(1)
        # Pseudo parameters (AWS::Region, ...) are not template nodes.
        if name in variables or name.startswith("AWS::"):
            continue
        yield Reference.from_placeholder(name)
