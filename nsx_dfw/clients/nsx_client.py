"""
HTTP client for the NSX-T Manager REST API.

Thin wrapper around a requests session: basic auth, JSON bodies, status-code
mapping into the NSXError hierarchy. Callers pass API paths
(e.g. "/api/v1/firewall/sections") and get parsed JSON back.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nsx_dfw.core.config import Settings
from nsx_dfw.core.errors import (
    IncorrectResponseCodeError,
    NSXConnectionError,
    RevisionConflictError,
)

logger = logging.getLogger(__name__)

HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

CODE_OK = 200
CODE_CREATED = 201
CODE_NO_CONTENT = 204
CODE_NOT_FOUND = 404
CODE_PRECONDITION_FAILED = 412


class NSXClient:
    """Synchronous NSX-T Manager client."""

    def __init__(
        self,
        base_url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: int = 30,
        retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: NSX manager URL, e.g. "https://nsx.example.com"
            user: Basic auth user
            password: Basic auth password
            verify_ssl: Verify the manager TLS certificate
            timeout: Per-request timeout in seconds
            retries: Retries for transient transport failures
            session: Pre-built session (tests inject a mock here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or self._create_session(user, password, verify_ssl, retries)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NSXClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.NSX_MANAGER_URL,
            user=settings.NSX_USER,
            password=settings.NSX_PASSWORD,
            verify_ssl=settings.NSX_VERIFY_SSL,
            timeout=settings.NSX_TIMEOUT,
            retries=settings.NSX_HTTP_RETRIES,
        )

    @staticmethod
    def _create_session(
        user: Optional[str], password: Optional[str], verify_ssl: bool, retries: int
    ) -> requests.Session:
        """Create a requests session with retry logic for transient failures."""
        session = requests.Session()
        # 412 is a revision conflict and must reach the caller untouched
        retry = Retry(
            total=retries,
            read=retries,
            connect=retries,
            backoff_factor=0.3,
            status_forcelist=(502, 503, 504),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.verify = verify_ssl
        if user:
            session.auth = (user, password or "")
        session.headers.update(HEADERS)
        return session

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        expected: Iterable[int],
        **kwargs: Any,
    ) -> requests.Response:
        url = self._url(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"NSX {method} {url} failed: {e}")
            raise NSXConnectionError(f"Cannot reach NSX manager at {url}: {e}") from e

        logger.debug(f"NSX {method} {url} -> {response.status_code}")

        if response.status_code in expected:
            return response

        body = response.text[:1000] if response.text else None
        if response.status_code == CODE_PRECONDITION_FAILED:
            raise RevisionConflictError(
                f"NSX {method} {path} rejected a stale revision: {body}",
                status_code=response.status_code,
                body=body,
            )
        raise IncorrectResponseCodeError(
            f"NSX {method} {path} returned unexpected status {response.status_code}: {body}",
            status_code=response.status_code,
            body=body,
        )

    @staticmethod
    def _parse(response: requests.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise IncorrectResponseCodeError(
                f"NSX returned a non-JSON body: {e}",
                status_code=response.status_code,
                body=response.text[:1000],
            ) from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """GET a resource. Returns None when the resource does not exist."""
        response = self._request("GET", path, (CODE_OK, CODE_NOT_FOUND), params=params)
        if response.status_code == CODE_NOT_FOUND:
            return None
        return self._parse(response)

    def post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON body and return the created object."""
        response = self._request("POST", path, (CODE_OK, CODE_CREATED), json=body)
        return self._parse(response)

    def put(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """PUT a JSON body and return the updated object."""
        response = self._request("PUT", path, (CODE_OK,), json=body)
        return self._parse(response)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> None:
        """DELETE a resource. NSX answers 200 even when the id never existed."""
        self._request("DELETE", path, (CODE_OK, CODE_NO_CONTENT), params=params)

    def close(self) -> None:
        self.session.close()
