"""Shared API error envelope."""

from __future__ import annotations


def error_payload(
    *,
    code: str,
    message: str,
    retryable: bool,
    details: dict | list | str | None = None,
) -> dict:
    error: dict[str, object] = {
        "code": code,
        "message": message,
        "retryable": retryable,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}
