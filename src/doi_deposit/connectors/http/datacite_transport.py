"""
HTTP transport for the DataCite Metadata Store (MDS) API.
"""

import logging
import time
from pathlib import Path
from typing import Any, List, Optional, Tuple

import requests

from ...core.collaborators import DepositTransport, ObjectRepository, TenantRepository
from ...core.exceptions import TransportError
from ...core.messages import DEPOSIT_ERROR
from ...core.models import RegisterableObject, Tenant


logger = logging.getLogger(__name__)


API_URL = "https://mds.datacite.org/"
TEST_API_URL = "https://mds.test.datacite.org/"
API_RESPONSE_OK = 201


class DataciteHttpTransport(DepositTransport):
    """
    Deposits registration documents with DataCite.

    A deposit is two requests:
    1. POST the metadata document to {api_url}metadata
    2. PUT the DOI/URL pair to {api_url}doi/{doi}

    Credentials come from the tenant's registration settings. The transport
    makes exactly one attempt; scheduling the next try is the next run.
    """

    def __init__(
        self,
        settings: TenantRepository,
        object_repository: Optional[ObjectRepository] = None,
        api_url: str = API_URL,
        test_api_url: str = TEST_API_URL,
        test_mode: bool = False,
        timeout: int = 30,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the transport.

        Args:
            settings: Source of tenant credentials ('username', 'password')
            object_repository: Notified of successful registrations
            api_url: Production MDS endpoint
            test_api_url: Test MDS endpoint
            test_mode: Deposit to the test endpoint
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent header
        """
        self.settings = settings
        self.object_repository = object_repository
        self.api_url = test_api_url if test_mode else api_url
        if not self.api_url.endswith("/"):
            self.api_url += "/"
        self.test_mode = test_mode
        self.timeout = timeout
        self.user_agent = user_agent or "DoiDeposit/1.0"
        self.session = requests.Session()

    def deposit(self, obj: RegisterableObject, tenant: Tenant, path: str) -> Any:
        """
        Deposit the document stored at ``path``.

        Returns:
            True on success, otherwise a list of (message_code, param) pairs

        Raises:
            TransportError if the MDS API cannot be reached
        """
        if not obj.pub_id:
            return [(DEPOSIT_ERROR, f"{obj.kind.value} {obj.object_id} has no DOI")]
        if not obj.url:
            return [(DEPOSIT_ERROR, f"{obj.kind.value} {obj.object_id} has no URL")]

        auth = (
            self.settings.get_tenant_setting(tenant.tenant_id, "username"),
            self.settings.get_tenant_setting(tenant.tenant_id, "password"),
        )
        document = Path(path).read_bytes()

        status, body = self._send(
            "POST",
            f"{self.api_url}metadata",
            data=document,
            content_type="application/xml;charset=UTF-8",
            auth=auth,
        )
        if status != API_RESPONSE_OK:
            return self._error(status, body)

        status, body = self._send(
            "PUT",
            f"{self.api_url}doi/{obj.pub_id}",
            data=f"doi={obj.pub_id}\nurl={obj.url}".encode("utf-8"),
            content_type="text/plain;charset=UTF-8",
            auth=auth,
        )
        if status != API_RESPONSE_OK:
            return self._error(status, body)

        if self.object_repository is not None:
            self.object_repository.mark_registered(obj, tenant)

        logger.info(f"Registered DOI {obj.pub_id} for {obj.kind.value} {obj.object_id}")
        return True

    def _send(
        self,
        method: str,
        url: str,
        data: bytes,
        content_type: str,
        auth: Tuple[str, str],
    ) -> Tuple[int, str]:
        """Perform one request and return (status_code, body)."""
        headers = {
            "Content-Type": content_type,
            "User-Agent": self.user_agent,
        }
        start_time = time.time()

        try:
            response = self.session.request(
                method,
                url,
                data=data,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"{method} {url} -> {response.status_code} ({duration_ms} ms)")
        return response.status_code, response.text

    def _error(self, status: int, body: str) -> List[Tuple[str, str]]:
        return [(DEPOSIT_ERROR, f"{status} - {body}")]

    def get_name(self) -> str:
        return "datacite"

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
