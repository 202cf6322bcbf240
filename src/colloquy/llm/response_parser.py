"""Extract assistant text from provider-specific response bodies."""

import json
from typing import Any

from .errors import InvalidResponseError
from .registry import Provider, ResponseShape, get_provider_info


def _first(container: dict[str, Any], field: str) -> Any:
    items = container.get(field)
    if not isinstance(items, list) or not items:
        raise InvalidResponseError(f"expected non-empty list '{field}'")
    return items[0]


def _string(container: Any, field: str) -> str:
    if not isinstance(container, dict):
        raise InvalidResponseError(f"expected object holding '{field}'")
    value = container.get(field)
    if not isinstance(value, str):
        raise InvalidResponseError(f"expected string '{field}'")
    return value


def _parse_choices(data: dict[str, Any]) -> str:
    choice = _first(data, "choices")
    if not isinstance(choice, dict):
        raise InvalidResponseError("expected object in 'choices'")
    return _string(choice.get("message"), "content")


def _parse_content_blocks(data: dict[str, Any]) -> str:
    return _string(_first(data, "content"), "text")


_PARSERS = {
    ResponseShape.CHOICES: _parse_choices,
    ResponseShape.CONTENT_BLOCKS: _parse_content_blocks,
}


def parse_response(body: bytes | str, provider: Provider | str) -> str:
    """Return the assistant text from a successful response body.

    The body shape is chosen from the provider's registry entry:
    ``content[0].text`` for content-block providers and
    ``choices[0].message.content`` for OpenAI-compatible ones.

    Args:
        body: Raw JSON response body
        provider: Provider the request was sent to

    Returns:
        The assistant's reply text

    Raises:
        InvalidResponseError: If the body is not JSON or lacks the expected shape
    """
    info = get_provider_info(provider)

    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:  # also UnicodeDecodeError, deep nesting
        raise InvalidResponseError(f"body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidResponseError("expected a JSON object")

    return _PARSERS[info.response_shape](data)
