"""Transport for the Analytics Reporting REST API (1.4).

every call is a POST to .../rest/?method=<Name> with a json body. errors come
back as {"error": ..., "error_description": ...}, usually with a 400, and
report_not_ready is one of them - so we look at the body before the status.

the ReportingApi protocol is what ReportClient depends on. tests swap in a
fake, production uses HttpReportingApi.
"""

import base64
import hashlib
import logging
import secrets
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from reportflow.config import Settings
from reportflow.exceptions import ApiError, FatalApiError, SubmissionError

logger = logging.getLogger(__name__)


class ReportingApi(Protocol):
    """The slice of the reporting service the core talks to."""

    def queue(self, description: dict[str, Any]) -> int: ...

    def get(self, report_id: int) -> dict[str, Any]: ...

    def ping(self) -> None: ...

    def close(self) -> None: ...


class WsseAuth(httpx.Auth):
    """Signs each request with the service's X-WSSE UsernameToken header."""

    def __init__(self, username: str, secret: str) -> None:
        self.username = username
        self.secret = secret

    def header(self, nonce: str | None = None, created: str | None = None) -> str:
        nonce = nonce or secrets.token_hex(16)
        created = created or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        digest = hashlib.sha1(f"{nonce}{created}{self.secret}".encode()).digest()
        return (
            f'UsernameToken Username="{self.username}", '
            f'PasswordDigest="{base64.b64encode(digest).decode()}", '
            f'Nonce="{base64.b64encode(nonce.encode()).decode()}", '
            f'Created="{created}"'
        )

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["X-WSSE"] = self.header()
        yield request


class HttpReportingApi:
    """httpx implementation of ReportingApi.

    the http client is opened lazily and dropped on close(), so one instance
    can serve several fetches with a fresh session each time.
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport  # tests pass an httpx.MockTransport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.settings.base_url,
                auth=WsseAuth(
                    self.settings.username, self.settings.secret.get_secret_value()
                ),
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )
        return self._client

    def _call(self, method: str, payload: dict[str, Any]) -> Any:
        logger.debug("POST %s method=%s", self.settings.base_url, method)
        response = self.client.post("", params={"method": method}, json=payload)

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and "error" in body:
            raise ApiError(str(body["error"]), body.get("error_description"))

        response.raise_for_status()
        return body

    def queue(self, description: dict[str, Any]) -> int:
        """Queue a report. Returns the report (job) id."""
        try:
            body = self._call("Report.Queue", {"reportDescription": description})
        except httpx.HTTPError as e:
            raise SubmissionError(f"Report queuing failed: {e}") from e

        try:
            return int(body["reportID"])
        except (KeyError, TypeError, ValueError) as e:
            raise SubmissionError(f"Unexpected Report.Queue response: {body!r}") from e

    def get(self, report_id: int) -> dict[str, Any]:
        """Fetch a queued report. Raises ApiError while it is not ready."""
        try:
            body = self._call("Report.Get", {"reportID": report_id})
        except httpx.HTTPStatusError as e:
            raise FatalApiError(f"http_{e.response.status_code}", str(e)) from e
        except httpx.HTTPError as e:
            raise FatalApiError("transport_error", str(e)) from e

        if not isinstance(body, dict) or "report" not in body:
            raise FatalApiError("invalid_response", f"Unexpected Report.Get response: {body!r}")
        return body["report"]

    def ping(self) -> None:
        """Cheap authenticated call used to check credentials."""
        try:
            self._call("Company.GetReportSuites", {})
        except httpx.HTTPError as e:
            raise ApiError("transport_error", str(e)) from e

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpReportingApi":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
