"""Base class and normalization helpers for resource facades.

RCI answers with kebab-case keys ("first-seen") and booleans that may come
back as true/false, "true"/"false", "yes"/"no", "1"/"0" or 1/0. Facades
reshape responses into snake_case keys and real booleans before returning
them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Union

from keenetic_client.exceptions import ApiError

if TYPE_CHECKING:
    from keenetic_client.client import KeeneticClient

TRUE_VALUES = (True, "true", "yes", "1", 1)
FALSE_VALUES = (False, "false", "no", "0", 0)

SAVE_CONFIG_COMMAND = {"system": {"configuration": {"save": {}}}}


def snake_case(key: Any) -> str:
    return str(key).replace("-", "_")


def normalize_keys(data: Any) -> Dict[str, Any]:
    """Convert top-level kebab-case keys to snake_case. Non-dicts give {}."""
    if not isinstance(data, dict):
        return {}
    return {snake_case(key): value for key, value in data.items()}


def deep_normalize_keys(obj: Any) -> Any:
    """Recursively convert kebab-case keys to snake_case in dicts and lists."""
    if isinstance(obj, dict):
        return {snake_case(key): deep_normalize_keys(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [deep_normalize_keys(item) for item in obj]
    return obj


def normalize_boolean(value: Any) -> Any:
    """Coerce the router's boolean spellings to bool; leave anything else as is.

    Example:
        >>> normalize_boolean("yes"), normalize_boolean(0), normalize_boolean("auto")
        (True, False, 'auto')
    """
    # 1 == True and 0 == False, so a plain membership test covers ints too
    if isinstance(value, (int, str)):
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
    return value


def normalize_booleans(data: Any, keys: Iterable[str]) -> Any:
    """Normalize the given keys of a dict in place, returning it."""
    if not isinstance(data, dict):
        return data
    for key in keys:
        if key in data:
            data[key] = normalize_boolean(data[key])
    return data


def as_list(value: Any) -> List[Any]:
    """RCI returns a lone object instead of a one-element list; undo that."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def check_command_status(response: Any) -> Any:
    """Raise ApiError for error statuses embedded in an HTTP 200 batch result.

    The router reports failed write commands as
    {"status": [{"status": "error", "message": "..."}]} somewhere inside
    the per-command result rather than with an HTTP error.

    Returns:
        The response unchanged when no error status is found.
    """
    message = _find_error_message(response)
    if message is not None:
        raise ApiError(f"Command failed: {message}", status_code=200, response_body=response)
    return response


def _find_error_message(obj: Any) -> Optional[str]:
    if isinstance(obj, dict):
        if obj.get("status") == "error":
            return str(obj.get("message") or "Unknown error")
        for value in obj.values():
            found = _find_error_message(value)
            if found is not None:
                return found
    elif isinstance(obj, list):
        for item in obj:
            found = _find_error_message(item)
            if found is not None:
                return found
    return None


class Resource:
    """Base for facades that translate calls into RCI requests."""

    def __init__(self, client: "KeeneticClient") -> None:
        self.client = client

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.client.get(path, params)

    def _get_raw(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        return self.client.get_raw(path, params)

    def _post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return self.client.post(path, body)

    def _post_raw(
        self, path: str, content: Union[str, bytes], content_type: str = "text/plain"
    ) -> Optional[str]:
        return self.client.post_raw(path, content, content_type=content_type)
