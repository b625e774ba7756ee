"""
Gateway resolver.

Locates the shared REST API (creating it by name when absent) and the
resource under which this stack's paths are attached.
"""

import logging
from typing import Any, List, Optional, Sequence

from shared_gateway.core.exceptions import AmbiguousMatchError, ConfigurationError, NotFoundError
from shared_gateway.models import ROOT_PATH, Gateway, LiveResource

logger = logging.getLogger(__name__)


def _matching_gateways(
    gateways: Sequence[Gateway], gateway_id: Optional[str], gateway_name: Optional[str]
) -> List[Gateway]:
    if gateway_id:
        return [gw for gw in gateways if gw.id == gateway_id]
    return [gw for gw in gateways if gw.name == gateway_name]


def resolve_gateway(
    client: Any,
    *,
    gateway_id: Optional[str] = None,
    gateway_name: Optional[str] = None,
    allow_create: bool = True,
) -> Gateway:
    """
    Resolve the shared gateway by id (preferred) or name.

    A name with no live match creates the gateway through `client` unless
    `allow_create` is False.

    Raises:
        ConfigurationError: neither id nor name given
        AmbiguousMatchError: more than one gateway carries the name
        NotFoundError: the id does not exist, or the name does not exist and
            creation is not allowed
        UpstreamError: the administration API failed
    """
    if not gateway_id and not gateway_name:
        raise ConfigurationError(
            "Unable to continue: provide API_GATEWAY_REST_API_ID or API_GATEWAY_REST_API_NAME"
        )

    matches = _matching_gateways(client.list_gateways(), gateway_id, gateway_name)

    if gateway_id:
        if not matches:
            raise NotFoundError(f"No API Gateway with id '{gateway_id}'")
        gateway = matches[0]
        logger.info(f"Using API Gateway {gateway.name} ({gateway.id})")
        return gateway

    if len(matches) > 1:
        raise AmbiguousMatchError(
            f"Found multiple APIs with the name: {gateway_name}. "
            "Please rename your api or specify API_GATEWAY_REST_API_ID"
        )

    if not matches:
        if not allow_create:
            raise NotFoundError(f"No API Gateway matching '{gateway_name}'")
        logger.warning(f"No API Gateway matching '{gateway_name}' attempting to create it.")
        gateway = client.create_gateway(gateway_name)
        logger.info(f"Created API Gateway {gateway.name} ({gateway.id})")
        return gateway

    gateway = matches[0]
    logger.info(f"Using API Gateway {gateway.name} ({gateway.id})")
    return gateway


def resolve_attachment(
    resources: Sequence[LiveResource], parent_id: Optional[str] = None
) -> LiveResource:
    """
    Pick the live resource new paths are grafted onto.

    Either the resource with id `parent_id`, or the gateway root ("/").
    """
    if parent_id:
        matches = [r for r in resources if r.id == parent_id]
        if not matches:
            raise NotFoundError(
                f"Unable to find API Gateway resource '{parent_id}'. "
                "Please check API_GATEWAY_REST_API_RESOURCE_ID and try again."
            )
    else:
        matches = [r for r in resources if r.path == ROOT_PATH]
        if not matches:
            raise NotFoundError("Unable to find the root resource '/' of the API Gateway")

    if len(matches) > 1:
        raise AmbiguousMatchError(
            f"Found {len(matches)} candidate parent resources: "
            + ", ".join(r.id for r in matches)
        )
    return matches[0]
