"""
Tests for the Brian transaction planner and amount formatting.
"""

import json

import httpx
import pytest

from ava_orchestrator.config.agent_config import ChainConfig
from ava_orchestrator.services.transaction_planner import BrianTransactionPlanner, format_units
from ava_orchestrator.utils.exceptions import ConfigurationError, TransactionPlanningError

URL = "https://planner.example/agent/transaction"

SWAP_BODY = {
    "result": [{
        "data": {
            "description": "Swap 10 AVAX for USDC on Trader Joe",
            "steps": [
                {"to": "0xapprove", "value": "0", "data": "0x095ea7b3"},
                {"to": "0xrouter", "value": "10000000000000000000", "data": "0x38ed1739"},
            ],
            "fromToken": {"symbol": "AVAX", "decimals": 18},
            "toToken": {"symbol": "USDC", "decimals": 6},
            "fromAmount": "10000000000000000000",
            "toAmountMin": "350500000",
            "fromAmountUSD": 352.1,
            "toAmountUSD": 350.5,
        }
    }]
}


def make_planner(handler, requests=None):
    def transport_handler(request):
        if requests is not None:
            requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(transport_handler))
    return BrianTransactionPlanner("brian-key", url=URL, http_client=client)


class TestFormatUnits:

    @pytest.mark.parametrize("value, decimals, expected", [
        ("1500000", 6, "1.5"),
        (10 ** 18, 18, "1"),
        ("0", 6, "0"),
        (123, 0, "123"),
        ("1", 18, "0.000000000000000001"),
    ])
    def test_format(self, value, decimals, expected):
        assert format_units(value, decimals) == expected

    def test_rejects_non_integers(self):
        with pytest.raises(ValueError):
            format_units("1.5", 6)


class TestBrianTransactionPlanner:

    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            BrianTransactionPlanner.from_config(ChainConfig(planner_api_key=None))

    @pytest.mark.asyncio
    async def test_plan(self):
        requests = []
        planner = make_planner(lambda request: httpx.Response(200, json=SWAP_BODY), requests)

        plan = await planner.plan("swap 10 AVAX to USDC", 43114, "0xabc")

        assert [s.to for s in plan.steps] == ["0xapprove", "0xrouter"]
        assert plan.steps[1].value == "10000000000000000000"
        assert (plan.from_token, plan.to_token) == ("AVAX", "USDC")
        assert (plan.from_amount, plan.to_amount) == ("10", "350.5")
        assert plan.from_amount_usd == "352.1"

        request = requests[0]
        assert request.headers["x-brian-api-key"] == "brian-key"
        assert json.loads(request.content) == {"prompt": "swap 10 AVAX to USDC", "chainId": "43114", "address": "0xabc"}
        await planner.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response, message", [
        (httpx.Response(500, text="upstream down"), "planner returned 500"),
        (httpx.Response(200, json={"result": [], "error": "Unsupported token"}), "Unsupported token"),
        (httpx.Response(200, json={"result": [{"data": {"steps": []}}]}), "plan has no steps"),
        (httpx.Response(200, text="<html>"), "invalid JSON"),
    ])
    async def test_unusable_responses(self, response, message):
        planner = make_planner(lambda request: response)
        with pytest.raises(TransactionPlanningError) as exc_info:
            await planner.plan("swap 10 AVAX to USDC", 43114, "0xabc")
        assert message in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        planner = make_planner(handler)
        with pytest.raises(TransactionPlanningError) as exc_info:
            await planner.plan("swap 10 AVAX to USDC", 43114, "0xabc")
        assert "request failed" in exc_info.value.message
