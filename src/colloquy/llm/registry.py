"""Registry of supported chat-completion providers.

Each provider is described once by a frozen ``ProviderInfo``. Call sites
read the auth scheme and response shape from the descriptor instead of
switching on the provider themselves.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Provider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GROQ = "groq"
    GEMINI = "gemini"
    CEREBRAS = "cerebras"
    MISTRAL = "mistral"
    OPENROUTER = "openrouter"


class AuthScheme(str, Enum):
    """How a provider expects the API key to be sent."""

    BEARER = "bearer"  # Authorization: Bearer <key>
    API_KEY_HEADER = "api_key_header"  # x-api-key + anthropic-version


class ResponseShape(str, Enum):
    """Where the assistant text lives in a provider's response body."""

    CHOICES = "choices"  # choices[0].message.content
    CONTENT_BLOCKS = "content_blocks"  # content[0].text


class ProviderInfo(BaseModel):
    """Static description of one provider's chat-completion endpoint."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    display_name: str
    base_url: str = Field(description="Full chat-completion endpoint URL")
    default_model: str
    available_models: tuple[str, ...]
    auth_scheme: AuthScheme = AuthScheme.BEARER
    response_shape: ResponseShape = ResponseShape.CHOICES
    credential_key: str = Field(description="Key in the local credential store")
    env_var: str = Field(description="Environment variable holding the API key")

    @model_validator(mode="after")
    def _default_model_is_available(self) -> "ProviderInfo":
        if self.default_model not in self.available_models:
            raise ValueError(
                f"Default model {self.default_model!r} is not listed for {self.provider.value}"
            )
        return self


_REGISTRY: dict[Provider, ProviderInfo] = {
    info.provider: info
    for info in (
        ProviderInfo(
            provider=Provider.OPENAI,
            display_name="OpenAI",
            base_url="https://api.openai.com/v1/chat/completions",
            default_model="gpt-4.1-mini",
            available_models=(
                "gpt-5",
                "gpt-5-mini",
                "gpt-5-nano",
                "gpt-4.1",
                "gpt-4.1-mini",
                "gpt-4o",
                "gpt-4o-mini",
            ),
            credential_key="OpenAIAPIKey",
            env_var="OPENAI_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.ANTHROPIC,
            display_name="Anthropic",
            base_url="https://api.anthropic.com/v1/messages",
            default_model="claude-sonnet-4-0",
            available_models=(
                "claude-opus-4-0",
                "claude-sonnet-4-0",
                "claude-3-7-sonnet-latest",
                "claude-3-5-haiku-latest",
            ),
            auth_scheme=AuthScheme.API_KEY_HEADER,
            response_shape=ResponseShape.CONTENT_BLOCKS,
            credential_key="AnthropicAPIKey",
            env_var="ANTHROPIC_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.GROQ,
            display_name="Groq",
            base_url="https://api.groq.com/openai/v1/chat/completions",
            default_model="llama-3.3-70b-versatile",
            available_models=(
                "llama-3.3-70b-versatile",
                "llama-3.1-8b-instant",
                "openai/gpt-oss-120b",
                "openai/gpt-oss-20b",
                "qwen/qwen3-32b",
            ),
            credential_key="GroqAPIKey",
            env_var="GROQ_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.GEMINI,
            display_name="Gemini",
            base_url="https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
            default_model="gemini-2.5-flash",
            available_models=(
                "gemini-2.5-pro",
                "gemini-2.5-flash",
                "gemini-2.5-flash-lite",
                "gemini-2.5-flash-image-preview",
                "gemini-2.0-flash",
            ),
            credential_key="GeminiAPIKey",
            env_var="GEMINI_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.CEREBRAS,
            display_name="Cerebras",
            base_url="https://api.cerebras.ai/v1/chat/completions",
            default_model="gpt-oss-120b",
            available_models=(
                "gpt-oss-120b",
                "llama-3.3-70b",
                "llama3.1-8b",
                "qwen-3-32b",
            ),
            credential_key="CerebrasAPIKey",
            env_var="CEREBRAS_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.MISTRAL,
            display_name="Mistral",
            base_url="https://api.mistral.ai/v1/chat/completions",
            default_model="mistral-large-latest",
            available_models=(
                "mistral-large-latest",
                "mistral-medium-latest",
                "mistral-small-latest",
                "codestral-latest",
            ),
            credential_key="MistralAPIKey",
            env_var="MISTRAL_API_KEY",
        ),
        ProviderInfo(
            provider=Provider.OPENROUTER,
            display_name="OpenRouter",
            base_url="https://openrouter.ai/api/v1/chat/completions",
            default_model="openai/gpt-oss-120b",
            available_models=(
                "openai/gpt-oss-120b",
                "anthropic/claude-sonnet-4",
                "google/gemini-2.5-pro",
                "meta-llama/llama-3.3-70b-instruct",
                "deepseek/deepseek-chat-v3.1",
            ),
            credential_key="OpenRouterAPIKey",
            env_var="OPENROUTER_API_KEY",
        ),
    )
}


def get_provider_info(provider: Provider | str) -> ProviderInfo:
    """Look up the descriptor for a provider.

    Args:
        provider: Provider enum member or its string value (case-insensitive)

    Returns:
        The provider's ProviderInfo

    Raises:
        ValueError: If a string does not name a supported provider
    """
    if not isinstance(provider, Provider):
        try:
            provider = Provider(str(provider).lower())
        except ValueError:
            supported = ", ".join(p.value for p in Provider)
            raise ValueError(
                f"Unsupported provider: {provider}. Supported providers: {supported}"
            ) from None
    return _REGISTRY[provider]


def list_providers() -> list[ProviderInfo]:
    """All provider descriptors in enumeration order."""
    return [_REGISTRY[p] for p in Provider]


def is_known_model(provider: Provider | str, model: str) -> bool:
    """Whether ``model`` is one of the provider's selectable models."""
    return model in get_provider_info(provider).available_models


def describe_model(model: str) -> str | None:
    """Short capability hint shown next to a model id in pickers."""
    if "image" in model:
        return "Can generate images"
    elif "pro" in model:
        return "Most capable"
    elif "flash" in model:
        return "Fast and efficient"
    elif "lite" in model:
        return "Ultra fast"
    return None
