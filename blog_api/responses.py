"""Response envelope shared by every endpoint: ``{success, message, data?, errors?}``."""
from typing import Any


def success(message: str, data: Any | None = None) -> dict:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def failure(message: str, errors: Any | None = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return body
