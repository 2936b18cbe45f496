"""
Shared fixtures and fake collaborators for the test suite.
"""

from typing import Any, Dict, List, Optional, Set

import pytest

from ava_orchestrator.core.event_bus import EventBus, reset_event_bus
from ava_orchestrator.models.transaction import TransactionPlan, TransactionStep
from ava_orchestrator.services.interfaces import TextGenerationResult
from ava_orchestrator.services.licensing import InMemoryLicensingClient
from ava_orchestrator.storage.memory import InMemoryStorage, InMemoryTaskRepository


class FakeTextGenerator:
    """Returns canned text and records every prompt."""

    def __init__(self, text: str = "analysis", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> TextGenerationResult:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return TextGenerationResult(text=self.text)


class FakeMarketData:
    """MarketDataProvider whose methods named in ``failing`` raise."""

    def __init__(self, failing: Optional[Set[str]] = None):
        self.failing = set(failing or [])
        self.calls: List[str] = []

    def _call(self, name: str, value: Any) -> Any:
        self.calls.append(name)
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")
        return value

    async def get_market_data(self) -> Any:
        return self._call("get_market_data", {"AVAX": {"price": 35.2}})

    async def get_wallet_balances(self, address: str) -> Any:
        return self._call("get_wallet_balances", {"address": address, "AVAX": "12.5"})

    async def get_top_agents(self, interval: str = "_7Days", page: int = 1, page_size: int = 10) -> Any:
        return self._call("get_top_agents", [{"agentName": "aixbt", "mindshare": 12.1}])

    async def search_tweets(self, query: str, from_date: str, to_date: str) -> Any:
        return self._call("search_tweets", [{"text": f"{query} is pumping"}])


class FakeChainClient:
    """
    ChainClient that returns ``0xhash<n>`` for the n-th sent transaction.

    ``fail_on`` makes the n-th send raise; ``revert_on`` makes its receipt reverted.
    """

    def __init__(self, fail_on: Optional[int] = None, revert_on: Optional[int] = None):
        self._address = "0x000000000000000000000000000000000000a11ce"
        self.fail_on = fail_on
        self.revert_on = revert_on
        self.sent: List[Dict[str, Any]] = []

    @property
    def address(self) -> str:
        return self._address

    async def send_transaction(self, to: str, value: int, data: str) -> str:
        index = len(self.sent) + 1
        if index == self.fail_on:
            raise RuntimeError("insufficient funds for gas")
        self.sent.append({"to": to, "value": value, "data": data})
        return f"0xhash{index}"

    async def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        index = int(tx_hash.replace("0xhash", ""))
        status = "reverted" if index == self.revert_on else "success"
        return {"transactionHash": tx_hash, "status": status}


class FakePlanner:
    """TransactionPlanner returning ``steps`` steps; prompts containing ``fail_on`` raise."""

    def __init__(self, steps: int = 2, fail_on: Optional[str] = None):
        self.steps = steps
        self.fail_on = fail_on
        self.calls: List[Dict[str, Any]] = []

    async def plan(self, prompt: str, chain_id: int, address: str) -> TransactionPlan:
        self.calls.append({"prompt": prompt, "chain_id": chain_id, "address": address})
        if self.fail_on and self.fail_on in prompt:
            raise RuntimeError(f"cannot plan '{prompt}'")
        return TransactionPlan(
            steps=[TransactionStep(to=f"0xrouter{i}", value="0", data=f"0x{i:02x}") for i in range(self.steps)],
            from_token="AVAX",
            to_token="USDC",
            from_amount="10",
            to_amount="350.5",
            from_amount_usd="352.0",
            to_amount_usd="350.5",
        )


class EventRecorder:
    """Subscribes to every channel and keeps (channel, payload) pairs."""

    def __init__(self, bus: EventBus):
        self.events: List[tuple] = []
        bus.subscribe("*", self._record, subscriber_name="recorder")

    def _record(self, channel: str, payload: Any) -> None:
        self.events.append((channel, payload))

    def on(self, channel: str) -> List[Any]:
        return [payload for ch, payload in self.events if ch == channel]


@pytest.fixture(autouse=True)
def _reset_global_bus():
    yield
    reset_event_bus()


@pytest.fixture
def bus():
    return EventBus(validate_payloads=True)


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def repository():
    return InMemoryTaskRepository()


@pytest.fixture
def licensing():
    return InMemoryLicensingClient()


@pytest.fixture
def llm():
    return FakeTextGenerator()
