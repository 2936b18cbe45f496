"""
Generic LLM Client Wrapper

Implements the text-generation collaborator on top of LangChain chat models,
for any provider configured from environment variables or an LLMConfig.

Example usage:
    from ava_orchestrator.services.llm_client import LLMClient

    # Uses environment variables: LLM_API_KEY, AGENT_LLM_PROVIDER, etc.
    client = LLMClient.from_env()
    result = await client.generate_text("Summarize the AVAX market", system_prompt="You are an analyst")
    print(result.text)
"""

from typing import Optional, List, Dict, Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import SystemMessage, HumanMessage, BaseMessage

from ava_orchestrator.config.agent_config import LLMConfig
from ava_orchestrator.config.env_config import EnvConfig
from ava_orchestrator.services.interfaces import TextGenerationResult
from ava_orchestrator.utils.exceptions import (
    ConfigurationError,
    MissingDependencyError,
    LLMError,
    InvalidParameterError
)
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class LLMClient:
    """
    Generic LLM Client - works with any LangChain chat model.

    Either pass a ready chat model (tests pass LangChain's fake models) or an
    LLMConfig from which the provider wrapper is built.
    """

    PROVIDER_DEFAULTS = {
        'anthropic': {
            'model': 'claude-sonnet-4-20250514',
            'langchain_package': 'langchain-anthropic',
        },
        'openai': {
            'model': 'gpt-4o',
            'langchain_package': 'langchain-openai',
        },
        'google': {
            'model': 'gemini-2.5-flash',
            'langchain_package': 'langchain-google-genai',
        },
        'groq': {
            'model': 'llama-3.3-70b-versatile',
            'langchain_package': 'langchain-groq',
        },
        'local': {
            'model': 'llama3',
            'base_url': 'http://localhost:11434',
            'langchain_package': 'langchain-community',
        },
    }

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        chat_model: Optional[BaseChatModel] = None
    ):
        """
        Initialize LLM Client.

        Args:
            config: Provider settings, used when ``chat_model`` is not given
            chat_model: Prebuilt LangChain chat model

        Raises:
            ConfigurationError: If no API key is available for a hosted provider
            MissingDependencyError: If the provider's LangChain package is not installed
        """
        self.config = config or LLMConfig()
        self.provider = self.config.provider
        self.model = self.config.model_name

        if chat_model is not None:
            self.client = chat_model
            logger.info(f"[LLM] Using injected chat model {type(chat_model).__name__}")
            return

        if self.provider not in self.PROVIDER_DEFAULTS:
            raise InvalidParameterError(
                parameter_name="provider",
                message=f"Unsupported provider: {self.provider}. "
                f"Supported: {list(self.PROVIDER_DEFAULTS.keys())}"
            )

        if not self.config.api_key and self.provider != 'local':
            raise ConfigurationError(
                setting_name="LLM_API_KEY",
                message=f"API key not found. Set LLM_API_KEY or {self.config.api_key_env_var}."
            )

        logger.info("[LLM] Initializing LLM Client")
        logger.debug(f"  Provider: {self.provider}")
        logger.debug(f"  Model: {self.model}")

        self.client = self._initialize_langchain_wrapper()

    @classmethod
    def from_env(cls, prefix: str = "AGENT_") -> "LLMClient":
        EnvConfig.load_env_file()
        return cls(LLMConfig.from_env(prefix))

    def _initialize_langchain_wrapper(self) -> BaseChatModel:
        if self.provider == 'anthropic':
            return self._init_langchain_anthropic()
        elif self.provider == 'openai':
            return self._init_langchain_openai()
        elif self.provider == 'google':
            return self._init_langchain_google()
        elif self.provider == 'groq':
            return self._init_langchain_groq()
        return self._init_langchain_ollama()

    def _common_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {'temperature': self.config.temperature}
        if self.config.max_tokens:
            kwargs['max_tokens'] = self.config.max_tokens
        return kwargs

    def _init_langchain_anthropic(self) -> BaseChatModel:
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError:
            raise MissingDependencyError(
                package_name="langchain-anthropic",
                install_command="pip install langchain-anthropic",
                purpose="LangChain Anthropic wrapper"
            )

        client = ChatAnthropic(
            model_name=self.model,
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            **self._common_kwargs()
        )
        logger.info(f"[LLM] ✓ Initialized LangChain ChatAnthropic ({self.model})")
        return client

    def _init_langchain_openai(self) -> BaseChatModel:
        try:
            from langchain_openai import ChatOpenAI
        except ImportError:
            raise MissingDependencyError(
                package_name="langchain-openai",
                install_command="pip install langchain-openai",
                purpose="LangChain OpenAI wrapper"
            )

        kwargs = self._common_kwargs()
        if self.config.base_url:
            kwargs['base_url'] = self.config.base_url
        client = ChatOpenAI(model=self.model, api_key=self.config.api_key, timeout=self.config.timeout, **kwargs)
        logger.info(f"[LLM] ✓ Initialized LangChain ChatOpenAI ({self.model})")
        return client

    def _init_langchain_google(self) -> BaseChatModel:
        try:
            from langchain_google_genai import ChatGoogleGenerativeAI
        except ImportError:
            raise MissingDependencyError(
                package_name="langchain-google-genai",
                install_command="pip install langchain-google-genai",
                purpose="LangChain Google wrapper"
            )

        client = ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self.config.api_key,
            temperature=self.config.temperature
        )
        logger.info(f"[LLM] ✓ Initialized LangChain ChatGoogleGenerativeAI ({self.model})")
        return client

    def _init_langchain_groq(self) -> BaseChatModel:
        try:
            from langchain_groq import ChatGroq
        except ImportError:
            raise MissingDependencyError(
                package_name="langchain-groq",
                install_command="pip install langchain-groq",
                purpose="Groq API client"
            )

        client = ChatGroq(model=self.model, api_key=self.config.api_key, **self._common_kwargs())
        logger.info(f"[LLM] ✓ Initialized LangChain ChatGroq ({self.model})")
        return client

    def _init_langchain_ollama(self) -> BaseChatModel:
        try:
            from langchain_community.chat_models import ChatOllama
        except ImportError:
            raise MissingDependencyError(
                package_name="langchain-community",
                install_command="pip install langchain-community",
                purpose="Ollama chat model"
            )

        base_url = self.config.base_url or self.PROVIDER_DEFAULTS['local']['base_url']
        client = ChatOllama(model=self.model, base_url=base_url, temperature=self.config.temperature)
        logger.info(f"[LLM] ✓ Initialized LangChain ChatOllama ({self.model} @ {base_url})")
        return client

    @staticmethod
    def build_messages(prompt: str, system_prompt: Optional[str] = None) -> List[BaseMessage]:
        messages: List[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))
        return messages

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> TextGenerationResult:
        """
        Generate text for ``prompt``.

        Raises:
            LLMError: If the provider call fails
        """
        messages = self.build_messages(prompt, system_prompt)
        try:
            response = await self.client.ainvoke(messages)
        except Exception as e:
            logger.error(f"[LLM] Generation failed: {e}")
            raise LLMError(self.provider, str(e), model=self.model, original_error=e) from e

        content = response.content if hasattr(response, 'content') else response
        text = content if isinstance(content, str) else str(content)

        usage = getattr(response, 'usage_metadata', None)
        tool_calls = list(getattr(response, 'tool_calls', None) or [])
        logger.debug(f"[LLM] Generated {len(text)} characters")
        return TextGenerationResult(text=text, usage=dict(usage) if usage else None, tool_calls=tool_calls)

    @staticmethod
    def list_supported_providers() -> List[str]:
        return list(LLMClient.PROVIDER_DEFAULTS.keys())
