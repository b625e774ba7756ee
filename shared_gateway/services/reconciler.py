"""
Template reconciler.

Rewrites a compiled CloudFormation template so that it deploys into an
existing shared REST API:

1. Gateway substitution: the RestApi node is dropped and every reference to
   it becomes the live gateway id (or the attachment resource id for
   RootResourceId).
2. Resource reconciliation: path resources that already exist live under the
   same parent are marked redundant.
3. Parent repair: redundant nodes are dropped and every reference to them
   becomes the live resource id.
4. Consistency: nothing may still point at a removed node.

Each phase returns a new document; the input template is never modified.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from shared_gateway.core.exceptions import (
    AmbiguousMatchError,
    DanglingReferenceError,
    PreconditionError,
)
from shared_gateway.models import Gateway, LiveResource, NodeKind, RedundantResource, node_kind
from shared_gateway.models.template import RESOURCE_ID_ATTRIBUTE, ROOT_RESOURCE_ATTRIBUTE
from shared_gateway.template.expressions import Reference, iter_references, substitute

logger = logging.getLogger(__name__)

RESOURCES = "Resources"
DEPENDS_ON = "DependsOn"
DEFAULT_GATEWAY_LOGICAL_ID = "ApiGatewayRestApi"


@dataclass(frozen=True)
class ReconcileResult:
    template: Dict[str, Any]
    gateway_key: str
    redundant: List[RedundantResource] = field(default_factory=list)

    @property
    def new_resource_keys(self) -> List[str]:
        """Path resources that will still be created on deploy."""
        return [
            key
            for key, node in self.template.get(RESOURCES, {}).items()
            if node_kind(node) is NodeKind.PATH_RESOURCE
        ]


def _depends_on(node: Any) -> List[str]:
    if not isinstance(node, dict):
        return []
    value = node.get(DEPENDS_ON)
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _prune_depends_on(node: Any, removed: Set[str]) -> Any:
    if not isinstance(node, dict) or DEPENDS_ON not in node:
        return node

    kept = [dep for dep in _depends_on(node) if dep not in removed]
    pruned = {key: value for key, value in node.items() if key != DEPENDS_ON}
    if kept:
        pruned[DEPENDS_ON] = kept if isinstance(node[DEPENDS_ON], list) else kept[0]
    return pruned


def _rebuild(
    template: Mapping[str, Any], removed: Set[str], mapping: Mapping[Reference, Any]
) -> Dict[str, Any]:
    """Copy `template` without the `removed` resources, substituting `mapping` everywhere."""
    rebuilt: Dict[str, Any] = {}
    for section, body in template.items():
        if section == RESOURCES and isinstance(body, dict):
            rebuilt[section] = {
                key: _prune_depends_on(substitute(node, mapping), removed)
                for key, node in body.items()
                if key not in removed
            }
        else:
            rebuilt[section] = substitute(body, mapping)
    return rebuilt


def find_gateway_root(resources: Mapping[str, Any], logical_id: str) -> str:
    """
    Logical id of the RestApi node to replace.

    The configured id wins; otherwise the template's only RestApi node. When
    the template declares none, the configured id is still used so stray
    references to it get rewritten.
    """
    roots = [key for key, node in resources.items() if node_kind(node) is NodeKind.GATEWAY_ROOT]
    if logical_id in roots or not roots:
        return logical_id
    if len(roots) > 1:
        raise AmbiguousMatchError(
            f"Template declares several REST APIs ({', '.join(roots)}) and none is named "
            f"'{logical_id}'"
        )
    return roots[0]


def substitute_gateway(
    template: Mapping[str, Any], *, gateway_key: str, gateway_id: str, attachment_id: str
) -> Dict[str, Any]:
    """Phase 1: drop the RestApi node and point every reference at the live gateway."""
    mapping = {
        Reference(gateway_key): gateway_id,
        Reference(gateway_key, ROOT_RESOURCE_ATTRIBUTE): attachment_id,
    }
    return _rebuild(template, {gateway_key}, mapping)


def _resolved_parent(parent: Any, redundant: Mapping[str, RedundantResource]) -> Optional[str]:
    if isinstance(parent, str):
        return parent
    ref = Reference.parse(parent)
    if ref is not None and ref.attribute in (None, RESOURCE_ID_ATTRIBUTE):
        match = redundant.get(ref.logical_id)
        if match is not None:
            return match.live_id
    return None


def _index_live(
    live_resources: Iterable[LiveResource],
) -> Dict[Tuple[str, str], List[LiveResource]]:
    index: Dict[Tuple[str, str], List[LiveResource]] = {}
    for resource in live_resources:
        if resource.parent_id is None or resource.path_part is None:
            continue
        index.setdefault((resource.parent_id, resource.path_part), []).append(resource)
    return index


def find_redundant_resources(
    resources: Mapping[str, Any], live_resources: Sequence[LiveResource]
) -> List[RedundantResource]:
    """
    Phase 2: path resources already present live under the same parent.

    A parent is known once it is a literal id or a reference to a node that is
    itself redundant, so the scan repeats until no more nodes collapse. This
    lets a whole chain of existing ancestors resolve regardless of the order
    in which the template lists them.
    """
    index = _index_live(live_resources)
    candidates = [
        (key, node) for key, node in resources.items() if node_kind(node) is NodeKind.PATH_RESOURCE
    ]
    redundant: Dict[str, RedundantResource] = {}

    changed = True
    while changed:
        changed = False
        for key, node in candidates:
            if key in redundant:
                continue
            props = node.get("Properties") or {}
            path_part = props.get("PathPart")
            if not isinstance(path_part, str):
                continue
            parent_id = _resolved_parent(props.get("ParentId"), redundant)
            if parent_id is None:
                continue

            matches = index.get((parent_id, path_part), [])
            if not matches:
                continue
            if len(matches) > 1:
                raise AmbiguousMatchError(
                    f"Live API has {len(matches)} resources with path part "
                    f"'{path_part}' under {parent_id}: "
                    + ", ".join(r.id for r in matches)
                )

            match = matches[0]
            redundant[key] = RedundantResource(
                key=key, live_id=match.id, live_parent_id=match.parent_id
            )
            logger.debug(f"{key} already exists as {match.path} ({match.id})")
            changed = True

    return list(redundant.values())


def remove_redundant_resources(
    template: Mapping[str, Any], redundant: Sequence[RedundantResource]
) -> Dict[str, Any]:
    """Phase 3: drop redundant nodes and repoint their dependents at the live ids."""
    mapping: Dict[Reference, Any] = {}
    for resource in redundant:
        mapping[Reference(resource.key)] = resource.live_id
        mapping[Reference(resource.key, RESOURCE_ID_ATTRIBUTE)] = resource.live_id
    return _rebuild(template, {resource.key for resource in redundant}, mapping)


def check_consistency(template: Mapping[str, Any], removed: Set[str]) -> None:
    """
    Phase 4: fail if anything still points at a removed node.

    Raises:
        DanglingReferenceError
    """
    for section, body in template.items():
        if section != RESOURCES or not isinstance(body, dict):
            for ref in iter_references(body):
                if ref.logical_id in removed:
                    raise DanglingReferenceError(section, str(ref))
            continue

        for key, node in body.items():
            for ref in iter_references(node):
                if ref.logical_id in removed:
                    raise DanglingReferenceError(key, str(ref))
            for dep in _depends_on(node):
                if dep in removed:
                    raise DanglingReferenceError(key, dep, "depends on removed resource")

            if node_kind(node) is NodeKind.PATH_RESOURCE:
                parent = (node.get("Properties") or {}).get("ParentId")
                if isinstance(parent, str):
                    continue
                ref = Reference.parse(parent)
                if (
                    ref is None
                    or ref.attribute not in (None, RESOURCE_ID_ATTRIBUTE)
                    or node_kind(body.get(ref.logical_id)) is not NodeKind.PATH_RESOURCE
                ):
                    raise DanglingReferenceError(
                        key, str(ref or parent), "has a ParentId outside the API"
                    )


def reconcile_template(
    template: Mapping[str, Any],
    *,
    gateway: Optional[Gateway],
    attachment: Optional[LiveResource],
    live_resources: Optional[Sequence[LiveResource]],
    gateway_logical_id: str = DEFAULT_GATEWAY_LOGICAL_ID,
) -> ReconcileResult:
    """
    Run all four phases against `template`.

    Raises:
        PreconditionError: the gateway, attachment point or live resources
            have not been resolved yet
        AmbiguousMatchError: duplicate live siblings or several RestApi nodes
        DanglingReferenceError: a reference could not be rewritten
    """
    if gateway is None:
        raise PreconditionError("You must have a gateway. Did you forget to resolve it?")
    if live_resources is None:
        raise PreconditionError(
            "You must have a list of the current resources. Did you forget to load them?"
        )
    if attachment is None:
        raise PreconditionError(
            "You must have an attachment resource. Did you forget to resolve it?"
        )

    gateway_key = find_gateway_root(template.get(RESOURCES) or {}, gateway_logical_id)

    patched = substitute_gateway(
        template, gateway_key=gateway_key, gateway_id=gateway.id, attachment_id=attachment.id
    )
    redundant = find_redundant_resources(patched.get(RESOURCES) or {}, live_resources)
    patched = remove_redundant_resources(patched, redundant)

    check_consistency(patched, {gateway_key} | {resource.key for resource in redundant})

    result = ReconcileResult(template=patched, gateway_key=gateway_key, redundant=redundant)
    logger.info(
        f"Reconciled template against API {gateway.id}: "
        f"{len(redundant)} existing, {len(result.new_resource_keys)} new path resources",
        extra={"gateway_id": gateway.id, "attachment_id": attachment.id},
    )
    return result
