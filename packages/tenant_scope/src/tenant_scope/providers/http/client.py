"""
HTTP Site Store

Site store backed by the platform's REST API.

Routes:
    GET    /companies/{company}/sites
    POST   /companies/{company}/sites
    PATCH  /companies/{company}/sites/{site}
    DELETE /companies/{company}/sites/{site}
    GET    /companies/{company}/sites/{site}/subsites/{subsite}
    POST   /companies/{company}/sites/{site}/subsites
    PATCH  /companies/{company}/sites/{site}/subsites/{subsite}
    DELETE /companies/{company}/sites/{site}/subsites/{subsite}
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from tenant_scope.contracts.models import Site, parse_sites
from tenant_scope.errors import StoreError
from tenant_scope.providers.base import SiteStore

logger = logging.getLogger(__name__)


class HttpSiteStore(SiteStore):
    """
    REST-backed site store.

    Each call targets one tenant; the API key is sent on every request.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the HTTP store.

        Args:
            api_url: Base URL of the API (e.g., "https://api.example.com/v1")
            api_key: API key for authentication
            timeout: HTTP request timeout
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _sites_path(self, company_id: str, site_id: str | None = None) -> str:
        path = f"/companies/{quote(company_id, safe='')}/sites"
        if site_id:
            path += f"/{quote(site_id, safe='')}"
        return path

    def _subsites_path(self, company_id: str, site_id: str, subsite_id: str | None = None) -> str:
        path = self._sites_path(company_id, site_id) + "/subsites"
        if subsite_id:
            path += f"/{quote(subsite_id, safe='')}"
        return path

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Make an authenticated API request and return the decoded body."""
        client = await self._get_client()
        url = f"{self.api_url}{endpoint}"

        try:
            response = await client.request(method.upper(), url, json=json_data)
        except httpx.RequestError as e:
            logger.error(f"HTTP request failed: {e}")
            raise StoreError(
                message=f"HTTP request failed: {e}",
                code="HTTP_ERROR",
                retryable=True,
            )

        if allow_not_found and response.status_code == 404:
            return None

        try:
            response_data = response.json() if response.content else None
        except ValueError:
            response_data = None

        if response.status_code >= 400:
            error = "Unknown error"
            if isinstance(response_data, dict):
                error = response_data.get("error") or response_data.get("message") or error
            raise StoreError(
                message=str(error),
                code=str(response.status_code),
                details=response_data if isinstance(response_data, dict) else {},
                retryable=response.status_code >= 500,
            )

        return response_data

    async def fetch_sites(self, company_id: str) -> list[Site]:
        """Fetch every site of a tenant."""
        data = await self._make_request("GET", self._sites_path(company_id))

        # Either a bare collection or {"sites": collection}
        if isinstance(data, dict) and "sites" in data:
            data = data["sites"]
        sites = parse_sites(data)

        logger.debug(
            "Fetched sites",
            extra={"company_id": company_id, "count": len(sites)},
        )
        return sites

    async def fetch_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
    ) -> dict[str, Any] | None:
        data = await self._make_request(
            "GET",
            self._subsites_path(company_id, site_id, subsite_id),
            allow_not_found=True,
        )
        return data if isinstance(data, dict) else None

    async def create_site(self, company_id: str, site: dict[str, Any]) -> str:
        data = await self._make_request("POST", self._sites_path(company_id), site)
        site_id = (data or {}).get("siteID") or (data or {}).get("id")
        if not site_id:
            raise StoreError("Store did not return a site id", code="BAD_RESPONSE", details=data or {})

        logger.info("Created site", extra={"company_id": company_id, "site_id": site_id})
        return str(site_id)

    async def update_site(self, company_id: str, site_id: str, changes: dict[str, Any]) -> None:
        await self._make_request("PATCH", self._sites_path(company_id, site_id), changes)
        logger.info("Updated site", extra={"company_id": company_id, "site_id": site_id})

    async def delete_site(self, company_id: str, site_id: str) -> None:
        await self._make_request("DELETE", self._sites_path(company_id, site_id))
        logger.info("Deleted site", extra={"company_id": company_id, "site_id": site_id})

    async def create_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite: dict[str, Any],
    ) -> str:
        data = await self._make_request("POST", self._subsites_path(company_id, site_id), subsite)
        subsite_id = (data or {}).get("subsiteID") or (data or {}).get("id")
        if not subsite_id:
            raise StoreError(
                "Store did not return a subsite id", code="BAD_RESPONSE", details=data or {}
            )

        logger.info(
            "Created subsite",
            extra={"company_id": company_id, "site_id": site_id, "subsite_id": subsite_id},
        )
        return str(subsite_id)

    async def update_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
        changes: dict[str, Any],
    ) -> None:
        await self._make_request(
            "PATCH", self._subsites_path(company_id, site_id, subsite_id), changes
        )

    async def delete_subsite(self, company_id: str, site_id: str, subsite_id: str) -> None:
        await self._make_request("DELETE", self._subsites_path(company_id, site_id, subsite_id))
