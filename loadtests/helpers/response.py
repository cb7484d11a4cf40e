"""Response error extraction for load test observability.

Parses Harvest ordering API error responses into human-readable messages.
Handles three response shapes:

- Error envelope: {"success": false, "error": "Kind", "message": "...", "details": {...}}
- Validation failures (422): the envelope with details.errors = [{"field", "message"}]
- FastAPI HTTPException: {"detail": "..."}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if "error" in body:
        message = f"{body['error']}: {body.get('message', '')}"
        problems = (body.get("details") or {}).get("errors")
        if problems:
            message += " | " + " | ".join(f"{p.get('field')}: {p.get('message')}" for p in problems)
        return message

    if "detail" in body:
        return str(body["detail"])[:300]

    return str(body)[:300]
