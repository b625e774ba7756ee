import pytest

from shared_gateway.core.exceptions import AmbiguousMatchError, PreconditionError
from shared_gateway.models import Gateway
from shared_gateway.services.pipeline import ReconciliationRun
from shared_gateway.tests.conftest import FakeAdminClient


class TestReconciliationRun:
    def test_run_against_existing_gateway(self, fake_client, gateway_config, serverless_template):
        run = ReconciliationRun(fake_client, gateway_config(API_GATEWAY_REST_API_NAME="shared"))

        result = run.run(serverless_template)

        assert run.gateway.id == "abc123"
        assert run.attachment.id == "r0"
        assert [r.key for r in result.redundant] == ["ApiGatewayResourceUsers"]
        assert run.summary() == {
            "gateway_id": "abc123",
            "gateway_name": "shared",
            "attachment_resource_id": "r0",
            "existing_resources": ["ApiGatewayResourceUsers"],
            "new_resources": ["ApiGatewayResourceUsersIdVar"],
        }
        assert fake_client.created == []

    def test_run_creates_missing_gateway_once(self, gateway_config, serverless_template):
        client = FakeAdminClient()
        run = ReconciliationRun(client, gateway_config(API_GATEWAY_REST_API_NAME="fresh"))

        run.run(serverless_template)
        run.resolve_gateway()

        assert client.created == [Gateway(id="new1", name="fresh")]
        assert run.attachment.id == "new1-root"
        resources = run.result.template["Resources"]
        assert resources["ApiGatewayResourceUsers"]["Properties"]["ParentId"] == "new1-root"

    def test_page_size_and_attachment_come_from_config(self, fake_client, gateway_config):
        cfg = gateway_config(
            API_GATEWAY_REST_API_ID="abc123",
            API_GATEWAY_REST_API_RESOURCE_ID="r1",
            RESOURCE_PAGE_SIZE=1,
        )
        run = ReconciliationRun(fake_client, cfg)

        run.resolve_gateway()
        run.load_resources()

        assert run.resolve_attachment().path == "/users"
        assert [call[2] for call in fake_client.resource_calls] == [1, 1]

    def test_load_before_resolve_is_a_precondition_error(self, fake_client, gateway_config):
        run = ReconciliationRun(fake_client, gateway_config(API_GATEWAY_REST_API_NAME="shared"))

        with pytest.raises(PreconditionError):
            run.load_resources()
        with pytest.raises(PreconditionError):
            run.resolve_attachment()
        with pytest.raises(PreconditionError):
            run.reconcile({"Resources": {}})

    def test_ambiguous_name_leaves_template_untouched(self, gateway_config, serverless_template):
        client = FakeAdminClient(
            gateways=[Gateway(id="a1", name="shared"), Gateway(id="a2", name="shared")]
        )
        run = ReconciliationRun(client, gateway_config(API_GATEWAY_REST_API_NAME="shared"))

        with pytest.raises(AmbiguousMatchError):
            run.run(serverless_template)

        assert "ApiGatewayRestApi" in serverless_template["Resources"]
        assert client.created == []
        assert client.resource_calls == []
        assert run.result is None
