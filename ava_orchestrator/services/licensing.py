"""
Licensing clients - Provenance and reuse terms for produced artifacts

Two implementations of the LicensingClient interface:
- InMemoryLicensingClient: local license book for tests and offline runs
- HTTPLicensingClient: JSON API with bearer authentication
"""

import uuid
from urllib.parse import quote
from typing import Any, Dict, List, Optional

import httpx

from ava_orchestrator.config.agent_config import LicensingConfig
from ava_orchestrator.models.licensing import IPLicenseTerms, IPMetadata, License
from ava_orchestrator.utils.exceptions import LicensingError, NetworkError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryLicensingClient:
    """
    License book kept in process memory.

    Terms proposals are accepted when they carry a royalty rate at or below
    ``max_royalty_rate``; negotiation caps the royalty rate at that value.
    """

    def __init__(self, max_royalty_rate: float = 0.1):
        self.max_royalty_rate = max_royalty_rate
        self._licenses: Dict[str, License] = {}

    async def request_ip(self, provider_id: str, requester_id: str, ip_type: str, description: str) -> Dict[str, Any]:
        terms = IPLicenseTerms(
            name=f"{ip_type} from {provider_id}",
            description=description,
            royalty_rate=self.max_royalty_rate,
        )
        metadata = IPMetadata(issuer_id=provider_id, holder_id=requester_id)
        return {"terms": terms, "metadata": metadata}

    async def propose_terms(self, requester_id: str, provider_id: str, terms: IPLicenseTerms) -> bool:
        accepted = (terms.royalty_rate or 0.0) <= self.max_royalty_rate
        logger.debug(f"[LICENSING] Terms '{terms.name}' from {provider_id} to {requester_id}: accepted={accepted}")
        return accepted

    async def negotiate_terms(self, counterparty_id: str, agent_id: str, terms: IPLicenseTerms) -> IPLicenseTerms:
        rate = terms.royalty_rate
        if rate is not None and rate > self.max_royalty_rate:
            rate = self.max_royalty_rate
        data = terms.to_dict()
        data["royalty_rate"] = rate
        return IPLicenseTerms.from_dict(data)

    async def mint_license(self, terms: IPLicenseTerms, metadata: IPMetadata) -> str:
        if not metadata.issuer_id:
            raise LicensingError("mint_license", "issuer_id is required")
        license_id = f"lic-{uuid.uuid4()}"
        stamped = IPMetadata.from_dict({**metadata.to_dict(), "license_id": license_id})
        self._licenses[license_id] = License(license_id=license_id, terms=terms, metadata=stamped)
        logger.info(f"[LICENSING] Minted {license_id} '{terms.name}' ({metadata.issuer_id} → {metadata.holder_id})")
        return license_id

    async def verify_license(self, license_id: str) -> bool:
        lic = self._licenses.get(license_id)
        return lic is not None and not lic.revoked

    async def revoke_license(self, license_id: str) -> None:
        self._get(license_id, "revoke_license").revoked = True

    def _get(self, license_id: str, operation: str) -> License:
        lic = self._licenses.get(license_id)
        if lic is None:
            raise LicensingError(operation, f"unknown license {license_id}", license_id=license_id)
        return lic

    async def get_license_terms(self, license_id: str) -> IPLicenseTerms:
        return self._get(license_id, "get_license_terms").terms

    async def get_license_metadata(self, license_id: str) -> IPMetadata:
        return self._get(license_id, "get_license_metadata").metadata

    async def list_licenses(
        self,
        issuer_id: Optional[str] = None,
        holder_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[License]:
        matches = [
            lic for lic in self._licenses.values()
            if (issuer_id is None or lic.metadata.issuer_id == issuer_id)
            and (holder_id is None or lic.metadata.holder_id == holder_id)
        ]
        return matches[offset:offset + limit]


class HTTPLicensingClient:
    """
    Licensing service reached over HTTP.

    Usage:
        client = HTTPLicensingClient.from_config(LicensingConfig(backend="http", endpoint="https://ip.example", api_key="..."))
        license_id = await client.mint_license(terms, metadata)
        await client.aclose()
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.endpoint = endpoint.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = http_client or httpx.AsyncClient(base_url=self.endpoint, timeout=timeout)
        self._headers = headers

    @classmethod
    def from_config(cls, config: LicensingConfig) -> "HTTPLicensingClient":
        return cls(config.endpoint, api_key=config.api_key, timeout=config.request_timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.endpoint}{path}"
        try:
            resp = await self._client.request(method, url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"[LICENSING] {method} {path} failed: {e}")
            raise NetworkError(url, str(e), original_error=e) from e

        if resp.status_code >= 400:
            logger.error(f"[LICENSING] {method} {path} returned {resp.status_code}")
            raise NetworkError(url, resp.text[:300] or resp.reason_phrase, status_code=resp.status_code)

        return resp.json()

    async def request_ip(self, provider_id: str, requester_id: str, ip_type: str, description: str) -> Dict[str, Any]:
        data = await self._request("POST", "/ip/request", {
            "providerId": provider_id,
            "requesterId": requester_id,
            "type": ip_type,
            "description": description,
        })
        return {
            "terms": IPLicenseTerms.from_dict(data["terms"]),
            "metadata": IPMetadata.from_dict(data["metadata"]),
        }

    async def propose_terms(self, requester_id: str, provider_id: str, terms: IPLicenseTerms) -> bool:
        data = await self._request("POST", "/ip/propose-terms", {
            "requesterId": requester_id,
            "providerId": provider_id,
            "terms": terms.to_dict(),
        })
        return bool(data.get("accepted"))

    async def negotiate_terms(self, counterparty_id: str, agent_id: str, terms: IPLicenseTerms) -> IPLicenseTerms:
        data = await self._request("POST", "/ip/negotiate", {
            "counterpartyId": counterparty_id,
            "agentId": agent_id,
            "terms": terms.to_dict(),
        })
        return IPLicenseTerms.from_dict(data)

    async def mint_license(self, terms: IPLicenseTerms, metadata: IPMetadata) -> str:
        data = await self._request("POST", "/ip/mint", {
            "terms": terms.to_dict(),
            "metadata": metadata.to_dict(),
        })
        license_id = data.get("licenseId")
        if not license_id:
            raise LicensingError("mint_license", "response carried no licenseId")
        logger.info(f"[LICENSING] Minted {license_id} '{terms.name}'")
        return license_id

    async def verify_license(self, license_id: str) -> bool:
        data = await self._request("GET", f"/ip/verify/{_quote(license_id)}")
        return bool(data.get("valid"))

    async def get_license_terms(self, license_id: str) -> IPLicenseTerms:
        return IPLicenseTerms.from_dict(await self._request("GET", f"/ip/terms/{_quote(license_id)}"))

    async def get_license_metadata(self, license_id: str) -> IPMetadata:
        return IPMetadata.from_dict(await self._request("GET", f"/ip/metadata/{_quote(license_id)}"))

    async def list_licenses(
        self,
        issuer_id: Optional[str] = None,
        holder_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[License]:
        options: Dict[str, Any] = {"limit": limit, "offset": offset}
        if issuer_id:
            options["issuerId"] = issuer_id
        if holder_id:
            options["holderId"] = holder_id
        data = await self._request("POST", "/ip/licenses", options)
        return [
            License(
                license_id=item["licenseId"],
                terms=IPLicenseTerms.from_dict(item["terms"]),
                metadata=IPMetadata.from_dict(item["metadata"]),
            )
            for item in data
        ]


def _quote(value: str) -> str:
    return quote(value, safe="")


def create_licensing_client(config: LicensingConfig):
    """Build the licensing client selected by ``config.backend``."""
    if config.backend == "http":
        return HTTPLicensingClient.from_config(config)
    return InMemoryLicensingClient()
