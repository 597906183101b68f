"""Async client for the npm package registry.

Wraps the registry's ``/<package>/latest`` endpoint with short timeouts and
structured results.  The only field Shipwright consumes from the response is
``version``.

Typical usage::

    async with RegistryClient() as client:
        lookup = await client.latest_version("express")
        if lookup.success:
            print(lookup.version)
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.-]+)?$")


class RegistryLookup(BaseModel):
    """Structured result of a single ``latest`` lookup."""

    package: str = Field(..., description="Package that was looked up")
    version: Optional[str] = Field(default=None, description="Exact latest version, e.g. 4.21.2")
    success: bool = Field(default=True, description="Whether the lookup succeeded")
    error: Optional[str] = Field(default=None, description="Error message on failure")

    @property
    def version_range(self) -> Optional[str]:
        """Caret range for the fetched version (``^4.21.2``)."""
        return f"^{self.version}" if self.version else None


class RegistryClient:
    """Async client for an npm-compatible registry.

    The client can be used directly (each call opens its own connection) or
    as an async context manager, in which case all calls share one
    ``httpx.AsyncClient`` and may run concurrently.
    """

    def __init__(
        self,
        base_url: str = "https://registry.npmjs.org",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._session: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 3.0)),
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "RegistryClient":
        self._session = self._client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def latest_path(package: str) -> str:
        """Registry path for a package's ``latest`` manifest.

        Scoped names keep their ``@`` and encode the slash
        (``@types/node`` -> ``/@types%2Fnode/latest``).
        """
        return f"/{quote(package, safe='@')}/latest"

    async def fetch_json(self, url: str, timeout: float | None = None) -> dict[str, Any]:
        """GET *url* (absolute or relative to the base URL) and decode JSON.

        Raises:
            httpx.HTTPError: On connection failures, timeouts and non-2xx
                responses.
            ValueError: If the body is not a JSON object.
        """
        request_timeout = httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT
        if self._session is not None:
            response = await self._session.get(url, timeout=request_timeout)
        else:
            async with self._client() as client:
                response = await client.get(url, timeout=request_timeout)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object from {url}, got {type(data).__name__}")
        return data

    async def latest_version(self, package: str) -> RegistryLookup:
        """Look up the latest published version of *package*.

        Never raises; failures are reported through ``success``/``error``.
        """
        try:
            data = await self.fetch_json(self.latest_path(package))
        except httpx.TimeoutException:
            return RegistryLookup(
                package=package,
                success=False,
                error=f"Registry lookup timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return RegistryLookup(
                package=package,
                success=False,
                error=f"Registry returned HTTP {exc.response.status_code} for {package}",
            )
        except httpx.HTTPError as exc:
            return RegistryLookup(
                package=package,
                success=False,
                error=f"Cannot reach {self.base_url}: {exc}",
            )
        except ValueError as exc:
            return RegistryLookup(package=package, success=False, error=str(exc))

        version = data.get("version")
        if not isinstance(version, str) or not _SEMVER_RE.match(version):
            return RegistryLookup(
                package=package,
                success=False,
                error=f"Registry response for {package} has no usable version",
            )
        return RegistryLookup(package=package, version=version)
