"""Local API key lookup.

Keys are held by an explicit ``CredentialStore`` handed to the chat service,
so nothing reads ambient settings at request time. Stores are keyed by each
provider's ``credential_key`` (e.g. ``OpenAIAPIKey``).
"""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from .errors import ConfigurationError
from .registry import Provider, get_provider_info, list_providers

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read-only key-value store of provider API keys.

    An absent or empty value means the provider is not configured.
    """

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values: dict[str, str] = dict(values or {})

    def get(self, provider: Provider | str) -> str:
        """Return the API key for a provider, or "" if none is stored."""
        info = get_provider_info(provider)
        return self._values.get(info.credential_key) or ""

    def is_configured(self, provider: Provider | str) -> bool:
        return self.get(provider) != ""

    def configured_providers(self) -> list[Provider]:
        """Providers that have a non-empty key, in registry order."""
        return [info.provider for info in list_providers() if self.is_configured(info.provider)]

    def with_key(self, provider: Provider | str, api_key: str) -> "CredentialStore":
        """Return a copy with ``api_key`` stored for ``provider``."""
        info = get_provider_info(provider)
        values = dict(self._values)
        values[info.credential_key] = api_key
        return CredentialStore(values)

    def merged(self, other: "CredentialStore") -> "CredentialStore":
        """Return a copy where non-empty values from ``other`` take precedence."""
        values = dict(self._values)
        values.update({k: v for k, v in other._values.items() if v})
        return CredentialStore(values)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CredentialStore":
        """Build a store from each provider's API key environment variable.

        Args:
            environ: Mapping to read from (default: os.environ)
        """
        env = os.environ if environ is None else environ
        values = {}
        for info in list_providers():
            api_key = env.get(info.env_var, "")
            if api_key:
                values[info.credential_key] = api_key
        return cls(values)

    @classmethod
    def from_file(cls, path: str | Path) -> "CredentialStore":
        """Load a store from a JSON object of credential keys to API keys.

        A missing file yields an empty store.

        Raises:
            ConfigurationError: If the file is not a JSON object of strings
        """
        path = Path(path)
        if not path.exists():
            logger.debug("No credential file at %s", path)
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read credential file {path}: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise ConfigurationError(
                f"Credential file {path} must contain a JSON object of string values"
            )
        return cls(data)

    def save(self, path: str | Path) -> None:
        """Write the store as JSON, readable by the owner only."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
        path.chmod(0o600)

    def __repr__(self) -> str:
        configured = ", ".join(p.value for p in self.configured_providers())
        return f"CredentialStore(configured=[{configured}])"
