"""
Unit tests for the DataCite HTTP transport.

The requests session is replaced with a mock; no network access.
"""

from unittest.mock import Mock

import pytest
import requests

from doi_deposit.connectors.http import API_URL, TEST_API_URL, DataciteHttpTransport
from doi_deposit.core.exceptions import TransportError
from doi_deposit.core.messages import DEPOSIT_ERROR
from doi_deposit.core.models import ObjectKind, RegisterableObject, Tenant
from doi_deposit.repositories import InMemoryObjectRepository, InMemoryTenantRepository


TENANT = Tenant(
    tenant_id="1",
    path="journal-a",
    settings={"username": "user", "password": "secret", "automaticRegistration": True},
)


def make_object(pub_id="10.1234/a.5"):
    return RegisterableObject(
        object_id="5",
        kind=ObjectKind.WORK,
        tenant_id="1",
        pub_id=pub_id,
        url="https://journal.example.com/article/5",
    )


def response(status_code, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    return resp


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "datacite-test.xml"
    path.write_bytes(b"<resource/>")
    return str(path)


@pytest.fixture
def objects():
    return InMemoryObjectRepository()


@pytest.fixture
def transport(objects):
    transport = DataciteHttpTransport(
        settings=InMemoryTenantRepository([TENANT]),
        object_repository=objects,
    )
    transport.session = Mock()
    return transport


class TestDataciteHttpTransport:
    """Tests for DataciteHttpTransport."""

    def test_success_posts_metadata_then_mints_doi(self, transport, objects, document):
        transport.session.request.side_effect = [response(201), response(201)]
        obj = make_object()

        assert transport.deposit(obj, TENANT, document) is True

        metadata_call, doi_call = transport.session.request.call_args_list
        assert metadata_call.args == ("POST", f"{API_URL}metadata")
        assert metadata_call.kwargs["data"] == b"<resource/>"
        assert metadata_call.kwargs["auth"] == ("user", "secret")
        assert metadata_call.kwargs["headers"]["Content-Type"] == "application/xml;charset=UTF-8"

        assert doi_call.args == ("PUT", f"{API_URL}doi/10.1234/a.5")
        assert doi_call.kwargs["data"] == (
            b"doi=10.1234/a.5\nurl=https://journal.example.com/article/5"
        )
        assert ("1", "article", "5") in objects.registered

    def test_metadata_rejected(self, transport, objects, document):
        transport.session.request.return_value = response(400, "Bad XML")

        result = transport.deposit(make_object(), TENANT, document)

        assert result == [(DEPOSIT_ERROR, "400 - Bad XML")]
        assert transport.session.request.call_count == 1
        assert objects.registered == set()

    def test_doi_rejected(self, transport, objects, document):
        transport.session.request.side_effect = [response(201), response(412, "Precondition failed")]

        result = transport.deposit(make_object(), TENANT, document)

        assert result == [(DEPOSIT_ERROR, "412 - Precondition failed")]
        assert objects.registered == set()

    def test_success_status_must_be_201(self, transport, document):
        transport.session.request.return_value = response(200, "OK")

        result = transport.deposit(make_object(), TENANT, document)

        assert result == [(DEPOSIT_ERROR, "200 - OK")]

    def test_missing_doi_is_a_failure(self, transport, document):
        result = transport.deposit(make_object(pub_id=None), TENANT, document)

        assert result[0][0] == DEPOSIT_ERROR
        assert "has no DOI" in result[0][1]
        transport.session.request.assert_not_called()

    def test_missing_url_is_a_failure(self, transport, document):
        obj = make_object()
        obj.url = None

        result = transport.deposit(obj, TENANT, document)

        assert result[0][0] == DEPOSIT_ERROR
        assert "has no URL" in result[0][1]
        transport.session.request.assert_not_called()

    def test_connection_error_raises(self, transport, document):
        transport.session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError) as exc_info:
            transport.deposit(make_object(), TENANT, document)

        assert "refused" in str(exc_info.value)

    def test_test_mode_uses_test_endpoint(self):
        transport = DataciteHttpTransport(settings=InMemoryTenantRepository([]), test_mode=True)

        assert transport.api_url == TEST_API_URL
        assert transport.get_name() == "datacite"

    def test_api_url_gets_trailing_slash(self):
        transport = DataciteHttpTransport(
            settings=InMemoryTenantRepository([]),
            api_url="https://mds.example.org/api",
        )

        assert transport.api_url == "https://mds.example.org/api/"

    def test_close_closes_session(self, transport):
        transport.close()

        transport.session.close.assert_called_once()
