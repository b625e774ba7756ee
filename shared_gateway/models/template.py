"""
Template node classification.

CloudFormation resource types handled by the reconciler.
"""

from enum import Enum
from typing import Any

ROOT_PATH = "/"

REST_API_TYPE = "AWS::ApiGateway::RestApi"
RESOURCE_TYPE = "AWS::ApiGateway::Resource"

# Attribute of a RestApi that names its "/" resource.
ROOT_RESOURCE_ATTRIBUTE = "RootResourceId"
# Attribute of a Resource that names its own id.
RESOURCE_ID_ATTRIBUTE = "ResourceId"


class NodeKind(str, Enum):
    GATEWAY_ROOT = "GatewayRoot"
    PATH_RESOURCE = "PathResource"
    OTHER = "Other"


_KIND_BY_TYPE = {
    REST_API_TYPE: NodeKind.GATEWAY_ROOT,
    RESOURCE_TYPE: NodeKind.PATH_RESOURCE,
}


def node_kind(node: Any) -> NodeKind:
    if not isinstance(node, dict):
        return NodeKind.OTHER
    return _KIND_BY_TYPE.get(node.get("Type", ""), NodeKind.OTHER)
