"""Test helper functions."""

from typing import Any, Dict


def auth_headers(user) -> Dict[str, str]:
    """Identity header the gateway forwards for an authenticated caller."""
    return {"X-User-Id": str(user.id)}


def assert_error(response, status_code: int, error: str) -> Dict[str, Any]:
    """Assert a structured error response and return its body."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["error"] == error
    assert "detail" in body
    return body
