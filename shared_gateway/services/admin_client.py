"""
API Gateway administration client.

Thin boto3 wrapper exposing the calls reconciliation needs. Every botocore
failure is re-raised as UpstreamError; nothing is retried here beyond
botocore's own retry configuration.
"""

import logging
from typing import Any, Callable, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared_gateway.config import MAX_RESOURCE_PAGE_SIZE, SharedGatewayConfig
from shared_gateway.core.exceptions import UpstreamError
from shared_gateway.models import Gateway, LiveResource, ResourcePage

logger = logging.getLogger(__name__)


def create_apigateway_client(config: SharedGatewayConfig):
    """Create a boto3 apigateway client from the configured region/profile."""
    session = boto3.session.Session(
        profile_name=config.AWS_PROFILE,
        region_name=config.AWS_REGION,
    )
    return session.client(
        "apigateway",
        config=Config(retries={"max_attempts": 5, "mode": "standard"}),
    )


class GatewayAdminClient:
    """Gateway administration API backed by a boto3 apigateway client."""

    def __init__(
        self,
        client: Any,
        *,
        description: str = "Generated by shared-gateway",
        endpoint_type: str = "EDGE",
    ):
        self.client = client
        self.description = description
        self.endpoint_type = endpoint_type

    @classmethod
    def from_config(cls, config: SharedGatewayConfig) -> "GatewayAdminClient":
        return cls(
            create_apigateway_client(config),
            description=config.API_GATEWAY_DESCRIPTION,
            endpoint_type=config.API_GATEWAY_ENDPOINT_TYPE,
        )

    def _call(self, operation: str, func: Callable[..., Any], **kwargs) -> Any:
        try:
            return func(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"API Gateway {operation} failed: {e}", extra={"operation": operation})
            raise UpstreamError(operation, e) from e

    def list_gateways(self) -> List[Gateway]:
        """All REST APIs visible to the caller."""

        def _collect() -> List[Gateway]:
            paginator = self.client.get_paginator("get_rest_apis")
            gateways: List[Gateway] = []
            for page in paginator.paginate():
                gateways.extend(Gateway.from_api(item) for item in page.get("items", []))
            return gateways

        return self._call("get_rest_apis", _collect)

    def create_gateway(self, name: str) -> Gateway:
        response = self._call(
            "create_rest_api",
            self.client.create_rest_api,
            name=name,
            description=self.description,
            endpointConfiguration={"types": [self.endpoint_type]},
        )
        return Gateway.from_api(response)

    def delete_gateway(self, gateway_id: str) -> None:
        self._call("delete_rest_api", self.client.delete_rest_api, restApiId=gateway_id)

    def list_resources(
        self,
        gateway_id: str,
        position: Optional[str] = None,
        limit: int = MAX_RESOURCE_PAGE_SIZE,
    ) -> ResourcePage:
        """One page of get_resources."""
        params = {"restApiId": gateway_id, "limit": limit}
        if position:
            params["position"] = position

        response = self._call("get_resources", self.client.get_resources, **params)
        return ResourcePage(
            items=[LiveResource.from_api(item) for item in response.get("items", [])],
            position=response.get("position"),
        )
