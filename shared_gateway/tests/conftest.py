from __future__ import annotations

import copy
from dataclasses import dataclass, field

import pytest

from shared_gateway.config import SharedGatewayConfig
from shared_gateway.models import Gateway, LiveResource, ResourcePage

ROOT_PLACEHOLDER = {"Fn::GetAtt": ["ApiGatewayRestApi", "RootResourceId"]}
REST_API_REF = {"Ref": "ApiGatewayRestApi"}


@dataclass
class FakeAdminClient:
    """In-memory stand-in for GatewayAdminClient."""

    gateways: list[Gateway] = field(default_factory=list)
    resources: dict[str, list[LiveResource]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.created: list[Gateway] = []
        self.deleted: list[str] = []
        self.resource_calls: list[tuple[str, str | None, int]] = []

    def list_gateways(self) -> list[Gateway]:
        return list(self.gateways)

    def create_gateway(self, name: str) -> Gateway:
        gateway = Gateway(id=f"new{len(self.created) + 1}", name=name)
        self.created.append(gateway)
        self.gateways.append(gateway)
        self.resources[gateway.id] = [LiveResource(id=f"{gateway.id}-root", path="/")]
        return gateway

    def delete_gateway(self, gateway_id: str) -> None:
        self.deleted.append(gateway_id)

    def list_resources(
        self, gateway_id: str, position: str | None = None, limit: int = 500
    ) -> ResourcePage:
        self.resource_calls.append((gateway_id, position, limit))
        everything = self.resources.get(gateway_id, [])
        start = int(position or 0)
        items = everything[start : start + limit]
        end = start + len(items)
        return ResourcePage(items=items, position=str(end) if end < len(everything) else None)


@pytest.fixture
def gateway_config():
    def _make(**overrides) -> SharedGatewayConfig:
        return SharedGatewayConfig(_env_file=None, **overrides)

    return _make


@pytest.fixture
def live_root():
    return [LiveResource(id="r0", path="/")]


@pytest.fixture
def live_with_users(live_root):
    return live_root + [LiveResource(id="r1", path="/users", pathPart="users", parentId="r0")]


@pytest.fixture
def shared_gateway():
    return Gateway(id="abc123", name="shared")


@pytest.fixture
def fake_client(shared_gateway, live_with_users):
    return FakeAdminClient(
        gateways=[shared_gateway, Gateway(id="zzz999", name="other")],
        resources={shared_gateway.id: list(live_with_users)},
    )


@pytest.fixture
def serverless_template():
    """A compiled template as produced by `serverless package` for a users service."""
    template = {
        "AWSTemplateFormatVersion": "2010-09-09",
        "Resources": {
            "GetUsersLambdaFunction": {
                "Type": "AWS::Lambda::Function",
                "Properties": {"FunctionName": "users-dev-getUsers", "Handler": "handler.list"},
            },
            "ApiGatewayRestApi": {
                "Type": "AWS::ApiGateway::RestApi",
                "Properties": {"Name": "dev-users"},
            },
            "ApiGatewayResourceUsers": {
                "Type": "AWS::ApiGateway::Resource",
                "Properties": {
                    "ParentId": ROOT_PLACEHOLDER,
                    "PathPart": "users",
                    "RestApiId": REST_API_REF,
                },
            },
            "ApiGatewayResourceUsersIdVar": {
                "Type": "AWS::ApiGateway::Resource",
                "Properties": {
                    "ParentId": {"Ref": "ApiGatewayResourceUsers"},
                    "PathPart": "{id}",
                    "RestApiId": REST_API_REF,
                },
            },
            "ApiGatewayMethodUsersGet": {
                "Type": "AWS::ApiGateway::Method",
                "Properties": {
                    "HttpMethod": "GET",
                    "ResourceId": {"Ref": "ApiGatewayResourceUsers"},
                    "RestApiId": REST_API_REF,
                    "Integration": {
                        "Type": "AWS_PROXY",
                        "Uri": {
                            "Fn::Join": [
                                "",
                                [
                                    "arn:",
                                    {"Ref": "AWS::Partition"},
                                    ":apigateway:",
                                    {"Ref": "AWS::Region"},
                                    ":lambda:path/2015-03-31/functions/",
                                    {"Fn::GetAtt": ["GetUsersLambdaFunction", "Arn"]},
                                    "/invocations",
                                ],
                            ]
                        },
                    },
                },
                "DependsOn": ["GetUsersLambdaPermissionApiGateway"],
            },
            "ApiGatewayMethodUsersIdVarGet": {
                "Type": "AWS::ApiGateway::Method",
                "Properties": {
                    "HttpMethod": "GET",
                    "ResourceId": {"Ref": "ApiGatewayResourceUsersIdVar"},
                    "RestApiId": REST_API_REF,
                },
            },
            "ApiGatewayDeployment1700000000000": {
                "Type": "AWS::ApiGateway::Deployment",
                "Properties": {"RestApiId": REST_API_REF, "StageName": "dev"},
                "DependsOn": ["ApiGatewayMethodUsersGet", "ApiGatewayMethodUsersIdVarGet"],
            },
            "GetUsersLambdaPermissionApiGateway": {
                "Type": "AWS::Lambda::Permission",
                "Properties": {
                    "FunctionName": {"Fn::GetAtt": ["GetUsersLambdaFunction", "Arn"]},
                    "Action": "lambda:InvokeFunction",
                    "Principal": "apigateway.amazonaws.com",
                    "SourceArn": {
                        "Fn::Join": [
                            "",
                            [
                                "arn:",
                                {"Ref": "AWS::Partition"},
                                ":execute-api:",
                                {"Ref": "AWS::Region"},
                                ":",
                                {"Ref": "AWS::AccountId"},
                                ":",
                                REST_API_REF,
                                "/*/*",
                            ],
                        ]
                    },
                },
            },
        },
        "Outputs": {
            "ServiceEndpoint": {
                "Description": "URL of the service endpoint",
                "Value": {
                    "Fn::Join": [
                        "",
                        [
                            "https://",
                            REST_API_REF,
                            ".execute-api.",
                            {"Ref": "AWS::Region"},
                            ".",
                            {"Ref": "AWS::URLSuffix"},
                            "/dev",
                        ],
                    ]
                },
            }
        },
    }
    return copy.deepcopy(template)
