"""
Tests for configuration loading.
"""

import pytest

from ava_orchestrator.config import EnvConfig, OrchestratorConfig
from ava_orchestrator.config.agent_config import (
    ChainConfig,
    LicensingConfig,
    LLMConfig,
    StorageConfig,
)

ENV_KEYS = [
    "AGENT_LLM_PROVIDER", "AGENT_LLM_MODEL", "AGENT_LLM_TEMPERATURE", "AGENT_LOG_LEVEL",
    "AGENT_STORAGE_BACKEND", "AGENT_LICENSING_BACKEND", "AGENT_EXTERNAL_AGENTS",
    "AGENT_VALIDATE_PAYLOADS", "AGENT_CHAIN_ID", "AGENT_SENDER_ADDRESS", "REDIS_HOST",
    "LLM_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "BRIAN_API_KEY", "ATCP_IP_ENDPOINT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLLMConfig:

    def test_defaults(self):
        config = LLMConfig()
        assert config.provider == "anthropic"
        assert config.api_key is None

    def test_provider_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        assert LLMConfig(provider="openai", model_name="gpt-4o").api_key == "sk-openai"

    def test_generic_key_wins(self, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "generic")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "specific")
        assert LLMConfig().api_key == "generic"

    @pytest.mark.parametrize("kwargs", [{"provider": "cohere"}, {"temperature": 3.0}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            LLMConfig(**kwargs)

    def test_to_dict_hides_key(self):
        assert "api_key" not in LLMConfig(api_key="secret").to_dict()


class TestCollaboratorConfigs:

    def test_chain_defaults_to_avalanche(self):
        assert ChainConfig().chain_id == 43114

    def test_invalid_chain_id(self):
        with pytest.raises(ValueError):
            ChainConfig(chain_id=0)

    def test_storage_backend_validated(self):
        with pytest.raises(ValueError):
            StorageConfig(backend="sqlite")

    def test_http_licensing_needs_endpoint(self):
        with pytest.raises(ValueError):
            LicensingConfig(backend="http")
        assert LicensingConfig(backend="http", endpoint="https://ip.example").endpoint == "https://ip.example"

    def test_licensing_to_dict_hides_key(self):
        config = LicensingConfig(backend="http", endpoint="https://ip.example", api_key="secret")
        assert "api_key" not in config.to_dict()
        assert config.to_dict(include_secrets=True)["api_key"] == "secret"


class TestOrchestratorConfig:

    def test_defaults(self):
        config = OrchestratorConfig()
        assert config.storage.backend == "memory"
        assert config.licensing.backend == "memory"
        assert config.validate_payloads is True
        assert "cookie" in config.external_agents

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AGENT_LLM_PROVIDER", "openai")
        monkeypatch.setenv("AGENT_LLM_MODEL", "gpt-4o")
        monkeypatch.setenv("AGENT_LOG_LEVEL", "debug")
        monkeypatch.setenv("AGENT_STORAGE_BACKEND", "REDIS")
        monkeypatch.setenv("REDIS_HOST", "cache")
        monkeypatch.setenv("AGENT_VALIDATE_PAYLOADS", "false")
        monkeypatch.setenv("AGENT_EXTERNAL_AGENTS", '{"oracle": ["oracle"]}')
        monkeypatch.setenv("AGENT_SENDER_ADDRESS", "0xabc")

        config = OrchestratorConfig.from_env()

        assert config.llm.provider == "openai"
        assert config.llm.model_name == "gpt-4o"
        assert config.log_level == "DEBUG"
        assert config.storage.backend == "redis"
        assert config.storage.host == "cache"
        assert config.validate_payloads is False
        assert config.external_agents == {"oracle": ["oracle"]}
        assert config.chain.sender_address == "0xabc"

    def test_invalid_external_agents_json_falls_back(self, monkeypatch):
        monkeypatch.setenv("AGENT_EXTERNAL_AGENTS", "not json")
        assert "cookie" in OrchestratorConfig.from_env().external_agents

    def test_from_dict(self):
        config = OrchestratorConfig.from_dict({
            "llm": {"provider": "groq", "model_name": "llama-3.1-70b", "api_key": "gsk"},
            "storage": {"backend": "redis", "host": "cache"},
            "log_level": "WARNING",
        })
        assert isinstance(config.llm, LLMConfig)
        assert config.llm.provider == "groq"
        assert config.storage.host == "cache"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            OrchestratorConfig(log_level="LOUD")

    def test_to_dict_secrets(self):
        config = OrchestratorConfig(llm=LLMConfig(api_key="secret"))
        assert "api_key" not in config.to_dict()["llm"]
        assert config.to_dict(include_secrets=True)["llm"]["api_key"] == "secret"


class TestEnvConfig:

    def test_typed_getters(self, monkeypatch):
        monkeypatch.setenv("TEST_FLAG", "yes")
        monkeypatch.setenv("TEST_INT", "12")
        monkeypatch.setenv("TEST_BAD_INT", "twelve")
        monkeypatch.setenv("TEST_LIST", "a, b,,c")
        assert EnvConfig.get_bool("TEST_FLAG") is True
        assert EnvConfig.get_int("TEST_INT") == 12
        assert EnvConfig.get_int("TEST_BAD_INT", 3) == 3
        assert EnvConfig.get_list("TEST_LIST") == ["a", "b", "c"]

    def test_missing(self, monkeypatch):
        monkeypatch.setenv("TEST_PRESENT", "1")
        monkeypatch.delenv("TEST_ABSENT", raising=False)
        assert EnvConfig.missing("TEST_PRESENT", "TEST_ABSENT") == ["TEST_ABSENT"]
        assert EnvConfig.check_required("TEST_PRESENT") is True

    def test_load_env_file_keeps_process_values(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("TEST_FROM_FILE=file\nTEST_OVERRIDDEN=file\n")
        monkeypatch.setenv("TEST_OVERRIDDEN", "process")
        monkeypatch.delenv("TEST_FROM_FILE", raising=False)

        assert EnvConfig.load_env_file(str(env_file)) is True
        assert EnvConfig.get("TEST_FROM_FILE") == "file"
        assert EnvConfig.get("TEST_OVERRIDDEN") == "process"
        monkeypatch.delenv("TEST_FROM_FILE")
