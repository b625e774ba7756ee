from .gateway import Gateway, LiveResource, RedundantResource, ResourcePage
from .template import (
    ROOT_PATH,
    NodeKind,
    node_kind,
)

__all__ = [
    "Gateway",
    "LiveResource",
    "NodeKind",
    "ROOT_PATH",
    "RedundantResource",
    "ResourcePage",
    "node_kind",
]
