"""Reading GameZone API error bodies in load test scenarios.

Two shapes come back from the API:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Storefront errors (400/401/403/404/409/500/503):
  {"error": "msg", "code": "InsufficientStock", ...} or {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

SOLD_OUT = "InsufficientStock"


def _json(response: Response) -> dict | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def error_code(response: Response) -> str | None:
    """The storefront error code of a failed response, if it carries one."""
    body = _json(response)
    return body.get("code") if body else None


def is_sold_out(response: Response) -> bool:
    return response.status_code == 409 and error_code(response) == SOLD_OUT


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message from an API error response."""
    body = _json(response)
    if body is None:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        message = " | ".join(f"{k}: {v}" for k, v in error.items()) if isinstance(error, dict) else str(error)
        return f"[{body['code']}] {message}" if body.get("code") else message

    return str(body)[:300]
