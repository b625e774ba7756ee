"""
CloudFormation Template Parser

Load compiled templates (JSON or YAML) into plain dicts and write them back.
Short-form intrinsic tags (!Ref, !GetAtt, !Sub, ...) are expanded to their
long form so every reference has one shape.
"""

import json
from pathlib import Path
from typing import Any, Optional

import yaml


class CfnLoader(yaml.SafeLoader):
    """YAML loader that handles CloudFormation intrinsic functions."""

    pass


def _construct_value(loader: yaml.Loader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    elif isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    return ""


def _ref_constructor(loader: yaml.Loader, node: yaml.Node) -> dict:
    return {"Ref": _construct_value(loader, node)}


def _get_att_constructor(loader: yaml.Loader, node: yaml.Node) -> dict:
    value = _construct_value(loader, node)
    if isinstance(value, str) and "." in value:
        value = value.split(".", 1)
    return {"Fn::GetAtt": value}


def _condition_constructor(loader: yaml.Loader, node: yaml.Node) -> dict:
    return {"Condition": _construct_value(loader, node)}


def _function_constructor(name: str):
    def construct(loader: yaml.Loader, node: yaml.Node) -> dict:
        return {f"Fn::{name}": _construct_value(loader, node)}

    return construct


# Register CloudFormation tags.
yaml.add_constructor("!Ref", _ref_constructor, Loader=CfnLoader)
yaml.add_constructor("!GetAtt", _get_att_constructor, Loader=CfnLoader)
yaml.add_constructor("!Condition", _condition_constructor, Loader=CfnLoader)
for _name in [
    "And",
    "Base64",
    "Cidr",
    "Equals",
    "FindInMap",
    "GetAZs",
    "If",
    "ImportValue",
    "Join",
    "Not",
    "Or",
    "Select",
    "Split",
    "Sub",
    "Transform",
]:
    yaml.add_constructor(f"!{_name}", _function_constructor(_name), Loader=CfnLoader)


def parse_template(content: str) -> dict:
    """
    Parse a template string (JSON is valid YAML, so one loader covers both).

    Raises:
        ValueError: the document is not a mapping
    """
    data = yaml.load(content, Loader=CfnLoader)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Template must be a mapping at the top level")
    return data


def load_template(path: Path) -> dict:
    """Read and parse a template file."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    if path.suffix == ".json":
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Template must be a JSON object: {path}")
        return data

    return parse_template(content)


def dump_template(template: dict, fmt: str = "json") -> str:
    """Serialize a template as JSON (default) or YAML in long-form intrinsics."""
    if fmt == "yaml":
        return yaml.safe_dump(template, sort_keys=False, default_flow_style=False)
    return json.dumps(template, indent=2, ensure_ascii=False) + "\n"


def format_for_path(path: Optional[Path]) -> str:
    if path is not None and path.suffix in (".yml", ".yaml"):
        return "yaml"
    return "json"


def write_template(template: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_template(template, format_for_path(path)), encoding="utf-8")
