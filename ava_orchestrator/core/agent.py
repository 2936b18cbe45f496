"""
Agent base - Event dispatch, audit hook, broadcasts and capability forwarders

Concrete agents subclass Agent and implement ``handle_event`` plus
``channels``. Storage, licensing and text generation are capabilities the
agent holds, not base classes: each is optional, and calling a forwarder
whose capability is missing raises ConfigurationError.
"""

import traceback
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.models.licensing import IPLicenseTerms, IPMetadata, License
from ava_orchestrator.models.messages import (
    Channel,
    create_agent_action,
    create_agent_error,
    create_agent_message,
)
from ava_orchestrator.services.interfaces import LicensingClient, StorageClient, TextGenerator
from ava_orchestrator.utils.exceptions import ConfigurationError, wrap_exception
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class Agent(ABC):
    """
    Base class for every agent on the bus.

    Attributes:
        name: Agent name, also its identity as license issuer
        event_bus: Bus the agent listens and emits on
        llm: Text-generation capability
        storage: Storage capability used for thoughts and intelligence
        licensing: Licensing capability used by the forwarders
    """

    def __init__(
        self,
        name: str,
        event_bus: EventBus,
        llm: Optional[TextGenerator] = None,
        storage: Optional[StorageClient] = None,
        licensing: Optional[LicensingClient] = None
    ):
        self.name = name
        self.event_bus = event_bus
        self.llm = llm
        self.storage = storage
        self.licensing = licensing
        self._handlers: Dict[str, Callable[[Any], Any]] = {}

    # ------------------------------------------------------------------
    # Bus wiring
    # ------------------------------------------------------------------

    @abstractmethod
    def channels(self) -> List[str]:
        """Channels this agent handles."""

    @abstractmethod
    async def handle_event(self, event: str, data: Any) -> None:
        """Dispatch one bus event."""

    def start(self) -> None:
        """Register this agent's handler on each of its channels."""
        for channel in self.channels():
            if channel in self._handlers:
                continue
            handler = self._make_handler(channel)
            self._handlers[channel] = handler
            self.event_bus.register(channel, handler)
        logger.info(f"[{self.name}] Listening on {', '.join(self._handlers)}")

    def stop(self) -> None:
        for channel, handler in self._handlers.items():
            self.event_bus.unregister(channel, handler)
        self._handlers.clear()
        self.emit_action("Stopping")

    def _make_handler(self, channel: str) -> Callable[[Any], Any]:
        async def handler(data: Any) -> None:
            await self._safe_handle(channel, data)
        handler.__qualname__ = f"{self.name}.handle_event[{channel}]"
        return handler

    async def _safe_handle(self, channel: str, data: Any) -> None:
        """Run ``handle_event`` so that nothing escapes to the bus as an unhandled error."""
        try:
            await self.handle_event(channel, data)
        except Exception as e:
            task_id = data.get("taskId") if isinstance(data, dict) else None
            error = wrap_exception(e, f"handle {channel}", {"agent_name": self.name, "task_id": task_id})
            logger.error(f"[{self.name}] Unhandled error on {channel} ({error.error_code}): {e}")
            logger.debug(traceback.format_exc())
            self.emit_error(str(e) or e.__class__.__name__, task_id)

    def emit(self, channel: str, payload: Any) -> None:
        self.event_bus.emit(channel, payload)

    # ------------------------------------------------------------------
    # Broadcasts
    # ------------------------------------------------------------------

    def emit_action(self, action: str, task_id: Optional[str] = None) -> None:
        self.emit(Channel.AGENT_ACTION, create_agent_action(self.name, action, task_id))

    def emit_message(self, content: str, collaboration_type: str, task_id: Optional[str] = None) -> None:
        self.emit(Channel.AGENT_MESSAGE, create_agent_message(self.name, content, collaboration_type, task_id))

    def emit_error(self, error: str, task_id: Optional[str] = None) -> None:
        self.emit(Channel.AGENT_ERROR, create_agent_error(self.name, error, task_id))

    def update_text_generator(self, llm: TextGenerator) -> None:
        self.llm = llm
        self.emit_action("Updated AI provider")

    # ------------------------------------------------------------------
    # Audit hook
    # ------------------------------------------------------------------

    async def on_step_finish(
        self,
        text: Optional[str] = None,
        tool_calls: Optional[List[Any]] = None,
        tool_results: Optional[List[Any]] = None
    ) -> Optional[str]:
        """
        Persist one reasoning/tool step as a thought.

        Returns:
            Key the thought was stored under, or None when there was nothing to store
        """
        tool_calls = tool_calls or []
        tool_results = tool_results or []
        called = ", ".join(str(c) for c in tool_calls) if tool_calls else "none"
        logger.info(f"[{self.name}] step finished. tools called: {called}")

        if not text and not tool_calls and not tool_results:
            return None
        if self.storage is None:
            logger.debug(f"[{self.name}] No storage capability; thought not persisted")
            return None

        key = f"{self.name}:{uuid.uuid4()}"
        await self.storage.store_cot(key, [text or ""], metadata={
            "agent": self.name,
            "toolCalls": tool_calls,
            "toolResults": tool_results,
            "timestamp": datetime.now().isoformat(),
        })
        return key

    async def retrieve_thought(self, key: str) -> Dict[str, Any]:
        return await self._require_storage().retrieve_cot(key)

    # ------------------------------------------------------------------
    # Storage forwarders
    # ------------------------------------------------------------------

    def _require_storage(self) -> StorageClient:
        if self.storage is None:
            raise ConfigurationError("storage", f"Agent '{self.name}' has no storage capability")
        return self.storage

    @staticmethod
    def storage_key(kind: str, *parts: str) -> str:
        """``storage_key("observation", "T1")`` -> ``"observation:T1"``"""
        return ":".join([kind, *parts])

    async def store_intelligence(self, key: str, data: Any, metadata: Optional[Dict[str, Any]] = None) -> None:
        await self._require_storage().store(key, data, metadata)

    async def retrieve_intelligence(self, key: str) -> Dict[str, Any]:
        return await self._require_storage().retrieve(key)

    # ------------------------------------------------------------------
    # Licensing forwarders
    # ------------------------------------------------------------------

    def _require_licensing(self) -> LicensingClient:
        if self.licensing is None:
            raise ConfigurationError("licensing", f"Agent '{self.name}' has no licensing capability")
        return self.licensing

    async def request_ip(self, provider_id: str, ip_type: str, description: str) -> Dict[str, Any]:
        return await self._require_licensing().request_ip(provider_id, self.name, ip_type, description)

    async def propose_terms(self, requester_id: str, terms: IPLicenseTerms) -> bool:
        return await self._require_licensing().propose_terms(requester_id, self.name, terms)

    async def negotiate_terms(self, counterparty_id: str, terms: IPLicenseTerms) -> IPLicenseTerms:
        return await self._require_licensing().negotiate_terms(counterparty_id, self.name, terms)

    async def mint_license(self, terms: IPLicenseTerms, metadata: Optional[IPMetadata] = None) -> str:
        """
        Mint a license. An empty ``issuer_id`` is filled with this agent's name;
        an explicit one (the producing agent) is kept.
        """
        licensing = self._require_licensing()
        if metadata is None:
            metadata = IPMetadata(issuer_id=self.name, holder_id=self.name)
        elif not metadata.issuer_id:
            metadata = IPMetadata.from_dict({**metadata.to_dict(), "issuer_id": self.name})
        return await licensing.mint_license(terms, metadata)

    async def verify_license(self, license_id: str) -> bool:
        return await self._require_licensing().verify_license(license_id)

    async def get_license_terms(self, license_id: str) -> IPLicenseTerms:
        return await self._require_licensing().get_license_terms(license_id)

    async def get_license_metadata(self, license_id: str) -> IPMetadata:
        return await self._require_licensing().get_license_metadata(license_id)

    async def list_licenses(
        self,
        issuer_id: Optional[str] = None,
        holder_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[License]:
        return await self._require_licensing().list_licenses(issuer_id, holder_id, limit, offset)
