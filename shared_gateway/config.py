"""
Shared gateway configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

from typing import Optional

from pydantic import Field, field_validator

from shared_gateway.core.config import BaseAppConfig, blank_to_none

# Upper bound accepted by apigateway:GetResources.
MAX_RESOURCE_PAGE_SIZE = 500


class SharedGatewayConfig(BaseAppConfig):
    """
    Configuration for reconciling a stack against a shared REST API.
    """

    # Target gateway (id wins over name)
    API_GATEWAY_REST_API_ID: Optional[str] = Field(
        default=None, description="Id of the shared REST API"
    )
    API_GATEWAY_REST_API_NAME: Optional[str] = Field(
        default=None, description="Name of the shared REST API (created when absent)"
    )
    API_GATEWAY_REST_API_RESOURCE_ID: Optional[str] = Field(
        default=None, description="Resource to attach new paths under (default: root '/')"
    )

    # Template
    API_GATEWAY_REST_API_LOGICAL_ID: str = Field(
        default="ApiGatewayRestApi", description="Logical id of the RestApi node in the template"
    )

    # Administration API
    RESOURCE_PAGE_SIZE: int = Field(
        default=MAX_RESOURCE_PAGE_SIZE,
        ge=1,
        le=MAX_RESOURCE_PAGE_SIZE,
        description="Page size for get_resources",
    )
    AWS_REGION: Optional[str] = Field(default=None, description="AWS region")
    AWS_PROFILE: Optional[str] = Field(default=None, description="AWS named profile")

    # Gateway creation
    API_GATEWAY_ENDPOINT_TYPE: str = Field(default="EDGE", description="Endpoint type")
    API_GATEWAY_DESCRIPTION: str = Field(
        default="Generated by shared-gateway", description="Description of created gateways"
    )

    @field_validator(
        "API_GATEWAY_REST_API_ID",
        "API_GATEWAY_REST_API_NAME",
        "API_GATEWAY_REST_API_RESOURCE_ID",
        "AWS_REGION",
        "AWS_PROFILE",
        mode="before",
    )
    @classmethod
    def normalize_optional(cls, value):
        return blank_to_none(value)


def get_config() -> SharedGatewayConfig:
    # pydantic-settings reads environment variables during instantiation.
    return SharedGatewayConfig()
