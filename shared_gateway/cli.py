#!/usr/bin/env python3
"""Shared API Gateway CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml

from shared_gateway.config import SharedGatewayConfig, get_config
from shared_gateway.core import console
from shared_gateway.core.exceptions import SharedGatewayError
from shared_gateway.core.logging_config import setup_logging
from shared_gateway.services.admin_client import GatewayAdminClient
from shared_gateway.services.pipeline import ReconciliationRun
from shared_gateway.template.parser import dump_template, load_template, write_template

# CLI flag -> config field
_OVERRIDES = {
    "api_id": "API_GATEWAY_REST_API_ID",
    "api_name": "API_GATEWAY_REST_API_NAME",
    "resource_id": "API_GATEWAY_REST_API_RESOURCE_ID",
    "logical_id": "API_GATEWAY_REST_API_LOGICAL_ID",
    "region": "AWS_REGION",
    "profile": "AWS_PROFILE",
    "page_size": "RESOURCE_PAGE_SIZE",
}


def create_admin_client(cfg: SharedGatewayConfig) -> GatewayAdminClient:
    return GatewayAdminClient.from_config(cfg)


def resolve_config(
    args: argparse.Namespace, base: SharedGatewayConfig | None = None
) -> SharedGatewayConfig:
    """Apply CLI overrides on top of the environment configuration."""
    base = base or get_config()
    update = {
        field: getattr(args, flag)
        for flag, field in _OVERRIDES.items()
        if getattr(args, flag, None) not in (None, "")
    }
    if getattr(args, "verbose", False):
        update["LOG_LEVEL"] = "DEBUG"
    return base.model_copy(update=update)


def _add_gateway_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--api-id", help="Shared REST API id (env: API_GATEWAY_REST_API_ID)")
    parser.add_argument(
        "--api-name",
        help="Shared REST API name, created when absent (env: API_GATEWAY_REST_API_NAME)",
    )
    parser.add_argument("--region", help="AWS region (env: AWS_REGION)")
    parser.add_argument("--profile", help="AWS named profile (env: AWS_PROFILE)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shared-gateway",
        description="Deploy several stacks into one shared API Gateway REST API.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Rewrite a compiled template to deploy into the shared API",
    )
    reconcile.add_argument("--template", required=True, help="Compiled template (JSON or YAML)")
    reconcile.add_argument(
        "--output",
        help="Where to write the patched template (default: stdout, JSON)",
    )
    reconcile.add_argument(
        "--resource-id",
        help="Existing resource to attach new paths under "
        "(default: '/', env: API_GATEWAY_REST_API_RESOURCE_ID)",
    )
    reconcile.add_argument(
        "--logical-id",
        help="Logical id of the RestApi node in the template (default: ApiGatewayRestApi)",
    )
    reconcile.add_argument("--page-size", type=int, help="get_resources page size (1..500)")
    _add_gateway_arguments(reconcile)
    reconcile.set_defaults(func=run_reconcile)

    validate = subparsers.add_parser(
        "validate",
        help="Check that the shared API exists and that you have permission",
    )
    validate.add_argument("--resource-id", help="Attachment resource to verify")
    validate.add_argument("--page-size", type=int, help="get_resources page size (1..500)")
    _add_gateway_arguments(validate)
    validate.set_defaults(func=run_validate)

    create = subparsers.add_parser("create", help="Create the shared API when absent")
    _add_gateway_arguments(create)
    create.set_defaults(func=run_create)

    delete = subparsers.add_parser("delete", help="Delete the shared API")
    delete.add_argument("--yes", action="store_true", help="Confirm deletion")
    _add_gateway_arguments(delete)
    delete.set_defaults(func=run_delete)

    info = subparsers.add_parser("info", help="Print the shared API summary")
    _add_gateway_arguments(info)
    info.set_defaults(func=run_info)

    return parser


def run_reconcile(args: argparse.Namespace, cfg: SharedGatewayConfig) -> int:
    template = load_template(Path(args.template))
    run = ReconciliationRun(create_admin_client(cfg), cfg)

    console.step(f"Reconciling {args.template}")
    result = run.run(template)

    if args.output:
        write_template(result.template, Path(args.output))
        console.success(f"Wrote {args.output}")
    else:
        sys.stdout.write(dump_template(result.template))

    for resource in result.redundant:
        console.info(f"{resource.key} already exists ({resource.live_id}), skipped")
    console.summary(run.gateway.name, run.gateway.id, run.attachment.id)
    return 0


def run_validate(args: argparse.Namespace, cfg: SharedGatewayConfig) -> int:
    run = ReconciliationRun(create_admin_client(cfg), cfg)
    gateway = run.resolve_gateway(allow_create=False)
    resources = run.load_resources()
    attachment = run.resolve_attachment()
    console.success(
        f"API Gateway {gateway.name} ({gateway.id}) is reachable: "
        f"{len(resources)} resources, attaching under {attachment.path} ({attachment.id})"
    )
    return 0


def run_create(args: argparse.Namespace, cfg: SharedGatewayConfig) -> int:
    gateway = ReconciliationRun(create_admin_client(cfg), cfg).resolve_gateway()
    console.success(f"API Gateway {gateway.name} ({gateway.id}) is ready")
    return 0


def run_delete(args: argparse.Namespace, cfg: SharedGatewayConfig) -> int:
    client = create_admin_client(cfg)
    gateway = ReconciliationRun(client, cfg).resolve_gateway(allow_create=False)
    if not args.yes:
        console.warning(
            f"Refusing to delete API Gateway {gateway.name} ({gateway.id}) without --yes"
        )
        return 1
    client.delete_gateway(gateway.id)
    console.success(f"Deleted API Gateway {gateway.name} ({gateway.id})")
    return 0


def run_info(args: argparse.Namespace, cfg: SharedGatewayConfig) -> int:
    gateway = ReconciliationRun(create_admin_client(cfg), cfg).resolve_gateway(allow_create=False)
    console.summary(gateway.name, gateway.id)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = resolve_config(args)
        setup_logging(cfg.LOG_CONFIG_PATH, cfg.LOG_LEVEL)
        return int(args.func(args, cfg))
    except SharedGatewayError as exc:
        console.error(f"Error: {exc}")
        return 1
    except (ValueError, FileNotFoundError, yaml.YAMLError) as exc:
        console.error(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
