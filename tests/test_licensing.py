"""
Tests for the licensing clients.
"""

import json

import httpx
import pytest

from ava_orchestrator.config.agent_config import LicensingConfig
from ava_orchestrator.models.enums import LicenseScope
from ava_orchestrator.models.licensing import IPLicenseTerms, IPMetadata, result_license_terms
from ava_orchestrator.services.licensing import (
    HTTPLicensingClient,
    InMemoryLicensingClient,
    create_licensing_client,
)
from ava_orchestrator.utils.exceptions import LicensingError, NetworkError

ENDPOINT = "https://ip.example"


class TestLicenseModels:

    def test_result_terms(self):
        terms = result_license_terms("T1", "Observation")
        assert terms.name == "Task Observation Result - T1"
        assert terms.scope == LicenseScope.COMMERCIAL
        assert terms.royalty_rate == 0.05

    def test_royalty_rate_bounds(self):
        with pytest.raises(ValueError):
            IPLicenseTerms(name="x", description="y", royalty_rate=1.5)

    def test_terms_dict_drops_unset_fields(self):
        data = IPLicenseTerms(name="x", description="y", scope="personal").to_dict()
        assert data["scope"] == "personal"
        assert "jurisdiction" not in data
        assert IPLicenseTerms.from_dict({**data, "unknown": 1}).scope == LicenseScope.PERSONAL


class TestInMemoryLicensingClient:

    @pytest.mark.asyncio
    async def test_mint_verify_revoke(self):
        client = InMemoryLicensingClient()
        license_id = await client.mint_license(
            result_license_terms("T1", "Execution"), IPMetadata(issuer_id="executor", holder_id="task-manager")
        )
        assert await client.verify_license(license_id) is True
        assert (await client.get_license_metadata(license_id)).license_id == license_id

        await client.revoke_license(license_id)
        assert await client.verify_license(license_id) is False

    @pytest.mark.asyncio
    async def test_mint_requires_issuer(self):
        with pytest.raises(LicensingError):
            await InMemoryLicensingClient().mint_license(
                result_license_terms("T1", "Execution"), IPMetadata(issuer_id="", holder_id="task-manager")
            )

    @pytest.mark.asyncio
    async def test_unknown_license(self):
        client = InMemoryLicensingClient()
        assert await client.verify_license("lic-missing") is False
        with pytest.raises(LicensingError):
            await client.get_license_terms("lic-missing")

    @pytest.mark.asyncio
    async def test_list_paging(self):
        client = InMemoryLicensingClient()
        ids = [
            await client.mint_license(result_license_terms(f"T{i}", "Observation"),
                                      IPMetadata(issuer_id="observer", holder_id="task-manager"))
            for i in range(3)
        ]
        page = await client.list_licenses(issuer_id="observer", limit=2, offset=1)
        assert [lic.license_id for lic in page] == ids[1:]


class TestHTTPLicensingClient:

    def make_client(self, handler):
        self.requests = []

        def transport_handler(request):
            self.requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport_handler))
        return HTTPLicensingClient(ENDPOINT, api_key="token", http_client=http_client)

    @pytest.mark.asyncio
    async def test_mint(self):
        client = self.make_client(lambda request: httpx.Response(200, json={"licenseId": "lic-42"}))

        license_id = await client.mint_license(
            result_license_terms("T1", "Observation"), IPMetadata(issuer_id="observer", holder_id="task-manager")
        )

        assert license_id == "lic-42"
        request = self.requests[0]
        assert request.url.path == "/ip/mint"
        assert request.headers["Authorization"] == "Bearer token"
        body = json.loads(request.content)
        assert body["metadata"]["issuer_id"] == "observer"
        assert body["terms"]["royalty_rate"] == 0.05

    @pytest.mark.asyncio
    async def test_mint_without_license_id(self):
        client = self.make_client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(LicensingError):
            await client.mint_license(
                result_license_terms("T1", "Observation"), IPMetadata(issuer_id="observer", holder_id="task-manager")
            )

    @pytest.mark.asyncio
    async def test_verify_quotes_license_id(self):
        client = self.make_client(lambda request: httpx.Response(200, json={"valid": True}))
        assert await client.verify_license("lic/1") is True
        assert self.requests[0].url.raw_path == b"/ip/verify/lic%2F1"

    @pytest.mark.asyncio
    async def test_list_licenses(self):
        item = {
            "licenseId": "lic-1",
            "terms": {"name": "n", "description": "d"},
            "metadata": {"issuer_id": "observer", "holder_id": "task-manager"},
        }
        client = self.make_client(lambda request: httpx.Response(200, json=[item]))

        [lic] = await client.list_licenses(issuer_id="observer", limit=10)

        assert lic.license_id == "lic-1"
        assert lic.metadata.issuer_id == "observer"
        assert json.loads(self.requests[0].content) == {"limit": 10, "offset": 0, "issuerId": "observer"}

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = self.make_client(lambda request: httpx.Response(503, text="maintenance"))
        with pytest.raises(NetworkError) as exc_info:
            await client.verify_license("lic-1")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self.make_client(handler)
        with pytest.raises(NetworkError):
            await client.propose_terms("observer", "executor", result_license_terms("T1", "Observation"))


def test_create_licensing_client():
    assert isinstance(create_licensing_client(LicensingConfig()), InMemoryLicensingClient)
    client = create_licensing_client(LicensingConfig(backend="http", endpoint=ENDPOINT))
    assert isinstance(client, HTTPLicensingClient)
