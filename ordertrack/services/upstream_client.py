"""HTTP client for the upstream commerce order API.

Every request uses bearer auth against a shop-scoped base URL built from
configuration. ``get_json`` raises ``UpstreamUnavailableError``;
``try_get_json`` returns an ``Outcome`` for best-effort callers.

Example:
    client = UpstreamClient("https://api.example.com/v2/my-shop", "tok_xxx")
    payload = await client.get_json("/orders", {"page": 1})
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ordertrack.errors import UpstreamUnavailableError
from ordertrack.services.outcomes import FailureKind, Outcome
from ordertrack.utils.redaction import sanitize_error_message

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class RawResponse:
    """Unchecked upstream response, for diagnostics."""

    status: int
    ok: bool
    content_type: str | None
    text: str


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class UpstreamClient:
    """Commerce API client bound to one shop."""

    def __init__(
        self,
        api_base: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._token = token
        self._timeout = timeout

    @property
    def api_base(self) -> str:
        return self._api_base

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self._api_base}/{path.lstrip('/')}"

    async def try_get_json(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Outcome[Any]:
        """GET a JSON resource, reporting failures as an Outcome.

        Args:
            path: Path relative to the API base (e.g. '/orders').
            params: Query parameters.

        Returns:
            Outcome holding the decoded JSON body on success.
        """
        url = self._url(path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers=self._get_headers(), params=params)
        except httpx.TimeoutException as e:
            logger.warning("Upstream timeout on %s: %s", path, e)
            return Outcome.failed(FailureKind.TIMEOUT, f"timeout calling {path}")
        except httpx.RequestError as e:
            detail = sanitize_error_message(str(e)) or "network error"
            logger.warning("Upstream network error on %s: %s", path, detail)
            return Outcome.failed(FailureKind.NETWORK_ERROR, detail)

        if not _is_success(response.status_code):
            logger.info("Upstream %s answered HTTP %d", path, response.status_code)
            return Outcome.failed(
                FailureKind.HTTP_ERROR,
                f"HTTP {response.status_code} from {path}",
                status=response.status_code,
            )

        try:
            return Outcome.success(response.json())
        except ValueError:
            return Outcome.failed(
                FailureKind.INVALID_PAYLOAD,
                f"invalid JSON from {path}",
                status=response.status_code,
            )

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON resource.

        Raises:
            UpstreamUnavailableError: On non-2xx, network failure, timeout or
                an undecodable body.
        """
        outcome = await self.try_get_json(path, params)
        if not outcome.ok:
            raise UpstreamUnavailableError(outcome.detail, status=outcome.status)
        return outcome.value

    async def get_raw(self, path: str, params: dict[str, Any] | None = None) -> RawResponse:
        """GET without status checking; returns the body as text.

        Raises:
            UpstreamUnavailableError: Only on network failure or timeout.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    self._url(path), headers=self._get_headers(), params=params
                )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(
                sanitize_error_message(str(e)) or "network error"
            ) from e
        return RawResponse(
            status=response.status_code,
            ok=_is_success(response.status_code),
            content_type=response.headers.get("content-type"),
            text=response.text,
        )
