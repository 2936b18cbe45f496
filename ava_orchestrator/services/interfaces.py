"""
Collaborator interfaces

The orchestration core talks to every external service through one of these
narrow protocols. Concrete adapters live next to this module (LangChain text
generation, HTTP licensing, HTTP transaction planning) and under
``ava_orchestrator.storage``; chain clients and market-data providers are
supplied by the host application.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ava_orchestrator.models.licensing import IPLicenseTerms, IPMetadata, License
from ava_orchestrator.models.task import Task
from ava_orchestrator.models.transaction import TransactionPlan


@dataclass
class TextGenerationResult:
    """Output of one text-generation call."""
    text: str
    usage: Optional[Dict[str, Any]] = None
    tool_calls: List[Any] = field(default_factory=list)
    tool_results: List[Any] = field(default_factory=list)


@runtime_checkable
class TextGenerator(Protocol):
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> TextGenerationResult:
        ...


@runtime_checkable
class StorageClient(Protocol):
    """Namespaced keyed store for results, thoughts and transaction plans."""

    async def store(self, key: str, data: Any, metadata: Optional[Dict[str, Any]] = None) -> None:
        ...

    async def retrieve(self, key: str) -> Dict[str, Any]:
        """Return ``{"data", "metadata", "timestamp"}``; raise StorageError if missing."""
        ...

    async def delete(self, key: str) -> bool:
        ...

    async def keys(self, prefix: str = "") -> List[str]:
        ...

    async def store_cot(self, key: str, thoughts: List[str], metadata: Optional[Dict[str, Any]] = None) -> None:
        ...

    async def retrieve_cot(self, key: str) -> Dict[str, Any]:
        """Return ``{"thoughts", "metadata", "timestamp"}``; raise StorageError if missing."""
        ...


@runtime_checkable
class TaskRepository(Protocol):
    """Canonical Task table owned by the task manager."""

    async def get(self, task_id: str) -> Optional[Task]:
        ...

    async def save(self, task: Task) -> None:
        ...

    async def list(self) -> List[Task]:
        ...


@runtime_checkable
class LicensingClient(Protocol):
    """Provenance and licensing collaborator."""

    async def request_ip(
        self,
        provider_id: str,
        requester_id: str,
        ip_type: str,
        description: str
    ) -> Dict[str, Any]:
        """Ask ``provider_id`` for an artifact; returns ``{"terms", "metadata"}``."""
        ...

    async def propose_terms(self, requester_id: str, provider_id: str, terms: IPLicenseTerms) -> bool:
        ...

    async def negotiate_terms(self, counterparty_id: str, agent_id: str, terms: IPLicenseTerms) -> IPLicenseTerms:
        ...

    async def mint_license(self, terms: IPLicenseTerms, metadata: IPMetadata) -> str:
        ...

    async def verify_license(self, license_id: str) -> bool:
        ...

    async def get_license_terms(self, license_id: str) -> IPLicenseTerms:
        ...

    async def get_license_metadata(self, license_id: str) -> IPMetadata:
        ...

    async def list_licenses(
        self,
        issuer_id: Optional[str] = None,
        holder_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[License]:
        ...


@runtime_checkable
class TransactionPlanner(Protocol):
    async def plan(self, prompt: str, chain_id: int, address: str) -> TransactionPlan:
        ...


@runtime_checkable
class ChainClient(Protocol):
    """On-chain execution collaborator."""

    @property
    def address(self) -> str:
        ...

    async def send_transaction(self, to: str, value: int, data: str) -> str:
        """Send one call and return its transaction hash."""
        ...

    async def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """Wait for confirmation. The receipt carries ``status`` ("success" or "reverted")."""
        ...


@runtime_checkable
class MarketDataProvider(Protocol):
    """Read-only signal sources used by the observer."""

    async def get_market_data(self) -> Any:
        ...

    async def get_wallet_balances(self, address: str) -> Any:
        ...

    async def get_top_agents(self, interval: str = "_7Days", page: int = 1, page_size: int = 10) -> Any:
        ...

    async def search_tweets(self, query: str, from_date: str, to_date: str) -> Any:
        ...
