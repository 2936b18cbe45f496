"""
Agent configuration - Settings for the orchestration core and its collaborators
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import os
from enum import Enum


class LLMProvider(str, Enum):
    """Supported LLM providers"""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    GROQ = "groq"
    LOCAL = "local"


DEFAULT_EXTERNAL_AGENTS: Dict[str, List[str]] = {
    "cookie": ["cookie", "mindshare", "top agents"],
}


@dataclass
class LLMConfig:
    """
    Configuration for the text-generation provider.

    Attributes:
        provider: LLM provider (anthropic, openai, google, groq, local)
        model_name: Model identifier for the provider
        api_key: API key for the provider (reads from LLM_API_KEY or the provider variable)
        base_url: Base URL for API (useful for local/custom servers)
        temperature: Temperature for response generation (0-2)
        max_tokens: Maximum tokens in response
        timeout: Request timeout in seconds
    """

    provider: str = "anthropic"
    model_name: str = "claude-sonnet-4-20250514"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.2
    max_tokens: Optional[int] = None
    timeout: int = 30

    def __post_init__(self):
        valid_providers = [p.value for p in LLMProvider]
        if self.provider not in valid_providers:
            raise ValueError(f"Provider must be one of {valid_providers}, got {self.provider}")

        if not 0 <= self.temperature <= 2:
            raise ValueError(f"Temperature must be between 0 and 2, got {self.temperature}")

        if not self.api_key:
            self.api_key = os.getenv('LLM_API_KEY') or os.getenv(self.api_key_env_var)

    @property
    def api_key_env_var(self) -> str:
        """Provider specific environment variable holding the API key."""
        env_vars = {
            "anthropic": "ANTHROPIC_API_KEY",
            "openai": "OPENAI_API_KEY",
            "google": "GOOGLE_API_KEY",
            "groq": "GROQ_API_KEY",
            "local": "LOCAL_LLM_URL"
        }
        return env_vars.get(self.provider, f"{self.provider.upper()}_API_KEY")

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "LLMConfig":
        max_tokens = os.getenv(f"{prefix}LLM_MAX_TOKENS")
        return cls(
            provider=os.getenv(f"{prefix}LLM_PROVIDER", "anthropic"),
            model_name=os.getenv(f"{prefix}LLM_MODEL", "claude-sonnet-4-20250514"),
            api_key=os.getenv("LLM_API_KEY"),
            base_url=os.getenv("LLM_API_BASE_URL"),
            temperature=float(os.getenv(f"{prefix}LLM_TEMPERATURE", "0.2")),
            max_tokens=int(max_tokens) if max_tokens else None,
            timeout=int(os.getenv(f"{prefix}TIMEOUT", "30")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding API key for security."""
        return {
            "provider": self.provider,
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "base_url": self.base_url,
        }


@dataclass
class ChainConfig:
    """
    Settings used by the executor when planning and sending transactions.

    Attributes:
        chain_id: Numeric chain id passed to the transaction planner (43114 = Avalanche C-Chain)
        sender_address: Address that signs and sends the planned steps
        planner_url: Transaction planning endpoint
        planner_api_key: API key for the planning endpoint
        request_timeout: HTTP timeout in seconds for planner calls
    """
    chain_id: int = 43114
    sender_address: Optional[str] = None
    planner_url: str = "https://api.brianknows.org/api/v0/agent/transaction"
    planner_api_key: Optional[str] = None
    request_timeout: float = 30.0

    def __post_init__(self):
        if self.chain_id <= 0:
            raise ValueError(f"chain_id must be positive, got {self.chain_id}")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "ChainConfig":
        return cls(
            chain_id=int(os.getenv(f"{prefix}CHAIN_ID", "43114")),
            sender_address=os.getenv(f"{prefix}SENDER_ADDRESS"),
            planner_url=os.getenv(
                "BRIAN_API_URL", "https://api.brianknows.org/api/v0/agent/transaction"
            ),
            planner_api_key=os.getenv("BRIAN_API_KEY"),
            request_timeout=float(os.getenv(f"{prefix}PLANNER_TIMEOUT", "30")),
        )

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        result = {
            "chain_id": self.chain_id,
            "sender_address": self.sender_address,
            "planner_url": self.planner_url,
            "request_timeout": self.request_timeout,
        }
        if include_secrets:
            result["planner_api_key"] = self.planner_api_key
        return result


@dataclass
class StorageConfig:
    """
    Storage backend selection.

    Attributes:
        backend: "memory" or "redis"
        host/port/db/password: Redis connection settings
        namespace: Prefix prepended to every key written by this process
    """
    backend: str = "memory"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    namespace: str = "ava"

    def __post_init__(self):
        if self.backend not in ("memory", "redis"):
            raise ValueError(f"Storage backend must be 'memory' or 'redis', got {self.backend}")

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "StorageConfig":
        return cls(
            backend=os.getenv(f"{prefix}STORAGE_BACKEND", "memory").lower(),
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD") or None,
            namespace=os.getenv(f"{prefix}STORAGE_NAMESPACE", "ava"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "namespace": self.namespace,
        }


@dataclass
class LicensingConfig:
    """
    Licensing backend selection.

    Attributes:
        backend: "memory" or "http"
        endpoint: Base URL of the licensing service
        api_key: Bearer token for the licensing service
        agent_id: Identity this process presents to the licensing service
    """
    backend: str = "memory"
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    agent_id: str = "ava"
    request_timeout: float = 30.0

    def __post_init__(self):
        if self.backend not in ("memory", "http"):
            raise ValueError(f"Licensing backend must be 'memory' or 'http', got {self.backend}")
        if self.backend == "http" and not self.endpoint:
            raise ValueError("Licensing endpoint is required for the http backend")

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "LicensingConfig":
        return cls(
            backend=os.getenv(f"{prefix}LICENSING_BACKEND", "memory").lower(),
            endpoint=os.getenv("ATCP_IP_ENDPOINT"),
            api_key=os.getenv("ATCP_IP_API_KEY"),
            agent_id=os.getenv(f"{prefix}LICENSING_AGENT_ID", "ava"),
            request_timeout=float(os.getenv(f"{prefix}LICENSING_TIMEOUT", "30")),
        )

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        result = {
            "backend": self.backend,
            "endpoint": self.endpoint,
            "agent_id": self.agent_id,
            "request_timeout": self.request_timeout,
        }
        if include_secrets:
            result["api_key"] = self.api_key
        return result


@dataclass
class OrchestratorConfig:
    """
    Top level configuration for the orchestration core.

    Attributes:
        llm: Text-generation configuration
        chain: Executor chain and planner configuration
        storage: Storage backend configuration
        licensing: Licensing backend configuration
        log_level: Logging level (default: 'INFO')
        validate_payloads: Check bus payloads against the channel registry on emit
        external_agents: Keywords routing a task verbatim to an external agent
    """

    llm: LLMConfig = field(default_factory=LLMConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    licensing: LicensingConfig = field(default_factory=LicensingConfig)
    log_level: str = "INFO"
    validate_payloads: bool = True
    external_agents: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_EXTERNAL_AGENTS.items()}
    )

    def __post_init__(self):
        if self.log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if isinstance(self.llm, dict):
            self.llm = LLMConfig(**self.llm)
        if isinstance(self.chain, dict):
            self.chain = ChainConfig(**self.chain)
        if isinstance(self.storage, dict):
            self.storage = StorageConfig(**self.storage)
        if isinstance(self.licensing, dict):
            self.licensing = LicensingConfig(**self.licensing)

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "OrchestratorConfig":
        """
        Create configuration from environment variables.

        Example:
            export AGENT_LOG_LEVEL=DEBUG
            export AGENT_STORAGE_BACKEND=redis
            export AGENT_EXTERNAL_AGENTS='{"cookie": ["cookie", "mindshare"]}'
            config = OrchestratorConfig.from_env()
        """
        from ava_orchestrator.config.env_config import EnvConfig

        external_agents = EnvConfig.get_json(f"{prefix}EXTERNAL_AGENTS")
        return cls(
            llm=LLMConfig.from_env(prefix),
            chain=ChainConfig.from_env(prefix),
            storage=StorageConfig.from_env(prefix),
            licensing=LicensingConfig.from_env(prefix),
            log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
            validate_payloads=EnvConfig.get_bool(f"{prefix}VALIDATE_PAYLOADS", True),
            external_agents=external_agents if external_agents is not None else {
                k: list(v) for k, v in DEFAULT_EXTERNAL_AGENTS.items()
            },
        )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "OrchestratorConfig":
        """
        Create configuration from dictionary.

        Example:
            config = OrchestratorConfig.from_dict({
                "llm": {"provider": "openai", "model_name": "gpt-4o", "api_key": "sk-..."},
                "storage": {"backend": "redis", "host": "cache"},
                "log_level": "DEBUG"
            })
        """
        return cls(**dict(config_dict))

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Args:
            include_secrets: Whether to include API keys (default: False)
        """
        result = {
            "llm": self.llm.to_dict(),
            "chain": self.chain.to_dict(include_secrets=include_secrets),
            "storage": self.storage.to_dict(),
            "licensing": self.licensing.to_dict(include_secrets=include_secrets),
            "log_level": self.log_level,
            "validate_payloads": self.validate_payloads,
            "external_agents": {k: list(v) for k, v in self.external_agents.items()},
        }

        if include_secrets and self.llm.api_key:
            result["llm"]["api_key"] = self.llm.api_key

        return result
