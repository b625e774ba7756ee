import pytest

from shared_gateway.core.exceptions import AmbiguousMatchError, ConfigurationError, NotFoundError
from shared_gateway.models import Gateway, LiveResource
from shared_gateway.services.gateway_resolver import resolve_attachment, resolve_gateway
from shared_gateway.tests.conftest import FakeAdminClient


class TestResolveGateway:
    def test_requires_id_or_name(self, fake_client):
        with pytest.raises(ConfigurationError):
            resolve_gateway(fake_client)

    def test_id_wins_over_name(self, fake_client):
        gateway = resolve_gateway(fake_client, gateway_id="zzz999", gateway_name="shared")

        assert gateway == Gateway(id="zzz999", name="other")

    def test_unknown_id_is_not_found(self, fake_client):
        with pytest.raises(NotFoundError, match="nope"):
            resolve_gateway(fake_client, gateway_id="nope", gateway_name="shared")

        assert fake_client.created == []

    def test_name_match(self, fake_client):
        gateway = resolve_gateway(fake_client, gateway_name="shared")

        assert gateway.id == "abc123"
        assert fake_client.created == []

    def test_duplicate_name_is_ambiguous_and_creates_nothing(self):
        client = FakeAdminClient(
            gateways=[Gateway(id="a1", name="shared"), Gateway(id="a2", name="shared")]
        )

        with pytest.raises(AmbiguousMatchError, match="shared"):
            resolve_gateway(client, gateway_name="shared")

        assert client.created == []
        assert len(client.gateways) == 2

    def test_missing_name_creates_gateway(self, fake_client, caplog):
        with caplog.at_level("WARNING"):
            gateway = resolve_gateway(fake_client, gateway_name="brand-new")

        assert gateway == Gateway(id="new1", name="brand-new")
        assert fake_client.created == [gateway]
        assert "attempting to create it" in caplog.text

    def test_missing_name_without_create(self, fake_client):
        with pytest.raises(NotFoundError):
            resolve_gateway(fake_client, gateway_name="brand-new", allow_create=False)

        assert fake_client.created == []


class TestResolveAttachment:
    def test_defaults_to_root(self, live_with_users):
        assert resolve_attachment(live_with_users).id == "r0"

    def test_explicit_parent(self, live_with_users):
        assert resolve_attachment(live_with_users, "r1").path == "/users"

    def test_explicit_parent_not_found(self, live_with_users):
        with pytest.raises(NotFoundError, match="missing"):
            resolve_attachment(live_with_users, "missing")

    def test_missing_root(self):
        resources = [LiveResource(id="r1", path="/users", pathPart="users", parentId="r0")]

        with pytest.raises(NotFoundError):
            resolve_attachment(resources)

    def test_several_roots_are_ambiguous(self):
        resources = [LiveResource(id="r0", path="/"), LiveResource(id="rX", path="/")]

        with pytest.raises(AmbiguousMatchError):
            resolve_attachment(resources)
