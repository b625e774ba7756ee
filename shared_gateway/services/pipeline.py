"""
Reconciliation run.

Sequences gateway resolution, resource loading, attachment resolution and
template reconciliation for one stack deployment. A run creates the shared
gateway at most once; later calls reuse the resolved state.
"""

import logging
from typing import Any, List, Mapping, Optional

from shared_gateway.config import SharedGatewayConfig
from shared_gateway.core.exceptions import PreconditionError
from shared_gateway.models import Gateway, LiveResource

from .gateway_resolver import resolve_attachment, resolve_gateway
from .reconciler import ReconcileResult, reconcile_template
from .resource_fetcher import fetch_all

logger = logging.getLogger(__name__)


class ReconciliationRun:
    def __init__(self, client: Any, config: SharedGatewayConfig):
        """
        Args:
            client: gateway administration client (GatewayAdminClient or compatible)
            config: gateway id/name, attachment resource id and page size
        """
        self.client = client
        self.config = config
        self.gateway: Optional[Gateway] = None
        self.resources: Optional[List[LiveResource]] = None
        self.attachment: Optional[LiveResource] = None
        self.result: Optional[ReconcileResult] = None

    def resolve_gateway(self, allow_create: bool = True) -> Gateway:
        if self.gateway is None:
            self.gateway = resolve_gateway(
                self.client,
                gateway_id=self.config.API_GATEWAY_REST_API_ID,
                gateway_name=self.config.API_GATEWAY_REST_API_NAME,
                allow_create=allow_create,
            )
        return self.gateway

    def load_resources(self) -> List[LiveResource]:
        if self.gateway is None:
            raise PreconditionError(
                "You must have a gateway. Did you forget to run resolve_gateway?"
            )
        self.resources = fetch_all(
            self.client, self.gateway.id, page_size=self.config.RESOURCE_PAGE_SIZE
        )
        return self.resources

    def resolve_attachment(self) -> LiveResource:
        if self.resources is None:
            raise PreconditionError(
                "You must have a list of the current resources. "
                "Did you forget to run load_resources?"
            )
        self.attachment = resolve_attachment(
            self.resources, self.config.API_GATEWAY_REST_API_RESOURCE_ID
        )
        return self.attachment

    def reconcile(self, template: Mapping[str, Any]) -> ReconcileResult:
        self.result = reconcile_template(
            template,
            gateway=self.gateway,
            attachment=self.attachment,
            live_resources=self.resources,
            gateway_logical_id=self.config.API_GATEWAY_REST_API_LOGICAL_ID,
        )
        return self.result

    def run(self, template: Mapping[str, Any]) -> ReconcileResult:
        """Resolve, load, attach and reconcile in order."""
        self.resolve_gateway()
        self.load_resources()
        self.resolve_attachment()
        return self.reconcile(template)

    def summary(self) -> dict:
        """Resolved identifiers handed back to the deployment driver."""
        return {
            "gateway_id": self.gateway.id if self.gateway else None,
            "gateway_name": self.gateway.name if self.gateway else None,
            "attachment_resource_id": self.attachment.id if self.attachment else None,
            "existing_resources": [r.key for r in self.result.redundant] if self.result else [],
            "new_resources": self.result.new_resource_keys if self.result else [],
        }
