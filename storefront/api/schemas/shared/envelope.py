# storefront/api/schemas/shared/envelope.py

from typing import Any, Optional


def unwrap_envelope(payload: Any, key: Optional[str] = None) -> Any:
    """
    Extracts the entity from a backend response.

    The backend answers with `{success, data: {...}}`; older endpoints
    return the entity unwrapped (`{product: {...}}`, `{users: [...]}`).
    Both shapes are accepted:

        >>> unwrap_envelope({"success": True, "data": {"users": [1]}}, "users")
        [1]
        >>> unwrap_envelope({"users": [1]}, "users")
        [1]
        >>> unwrap_envelope({"success": True, "data": {"id": 7}}, "product")
        {'id': 7}
    """
    if not isinstance(payload, dict):
        return payload

    body = payload.get("data", payload) if "success" in payload or "data" in payload else payload

    if key is None:
        return body

    if isinstance(body, dict) and key in body:
        return body[key]

    return body
