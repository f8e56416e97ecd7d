"""Map raw remote failures onto a small, closed set of user-facing errors."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Mapping, Optional

SAFETY_MARKER = "SAFETY"

RATE_LIMIT_MESSAGE = (
    "Request limit reached. Please wait a minute and try again. "
    "For higher usage, please check your plan and billing details."
)
SAFETY_MESSAGE = (
    "The request was blocked by safety filters. "
    "Please try a different photo, outfit, or custom prompt."
)
EMPTY_RESPONSE_MESSAGE = (
    "The model did not return a result. The response may have been empty, "
    "malformed, or blocked by content policies."
)


class ErrorKind(str, Enum):
    """Classified failure categories, in detection order."""

    RATE_LIMITED = "rate_limited"
    SAFETY_BLOCKED = "safety_blocked"
    REMOTE_API_ERROR = "remote_api_error"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


class RequestRejected(RuntimeError):
    """Raised before any remote call when an operation may not start."""


class EmptyResponseError(RuntimeError):
    """The remote call succeeded but carried no usable payload."""


class SafetyBlockedError(RuntimeError):
    """The remote call finished with a safety finish reason."""

    def __init__(self, message: str = "", finish_reason: str = SAFETY_MARKER) -> None:
        super().__init__(message or f"Generation stopped with finish reason {finish_reason}")
        self.finish_reason = finish_reason


class GenerationError(RuntimeError):
    """A classified failure of a generate or enhance operation."""

    def __init__(self, kind: ErrorKind, message: str, context: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = context

    @property
    def retriable(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED


def _unwrap(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    inner = payload.get("error")
    if isinstance(inner, Mapping):
        return inner
    return payload


def _payload_from_text(text: str) -> Optional[Mapping[str, Any]]:
    stripped = text.strip()
    if not stripped.startswith("{"):
        return None
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, Mapping) else None


def _structured_payload(failure: Any) -> Optional[Mapping[str, Any]]:
    """Extract a ``{code, status, message}`` mapping from whatever was raised."""
    if isinstance(failure, Mapping):
        return _unwrap(failure)

    # google.genai.errors.APIError and look-alikes
    code = getattr(failure, "code", None)
    status = getattr(failure, "status", None)
    if isinstance(code, int) or isinstance(status, str):
        details = getattr(failure, "details", None)
        message = getattr(failure, "message", None)
        if not message and isinstance(details, Mapping):
            message = _unwrap(details).get("message")
        return {"code": code, "status": status, "message": message}

    if isinstance(failure, BaseException):
        parsed = _payload_from_text(str(failure))
        if parsed is not None:
            return _unwrap(parsed)
    return None


def _is_rate_limited(payload: Mapping[str, Any]) -> bool:
    return payload.get("code") == 429 or payload.get("status") == "RESOURCE_EXHAUSTED"


def _finish_reason(failure: Any, payload: Optional[Mapping[str, Any]]) -> Optional[str]:
    reason = None
    if payload is not None:
        reason = payload.get("finish_reason") or payload.get("finishReason")
    if reason is None:
        reason = getattr(failure, "finish_reason", None)
    if reason is None:
        return None
    return str(getattr(reason, "name", reason))


def classify_failure(failure: Any, context: str = "generation") -> GenerationError:
    """Return the :class:`GenerationError` describing ``failure``.

    ``failure`` may be an exception raised by the client or SDK, or a plain
    mapping shaped like ``{"code", "status", "message"}`` (optionally nested
    under ``"error"``).
    """
    if isinstance(failure, GenerationError):
        return failure

    payload = _structured_payload(failure)
    text = str(failure) if isinstance(failure, BaseException) else ""
    if payload is not None and payload.get("message"):
        text = f"{text} {payload['message']}"

    if payload is not None and _is_rate_limited(payload):
        return GenerationError(ErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE, context)

    if (
        isinstance(failure, SafetyBlockedError)
        or _finish_reason(failure, payload) == SAFETY_MARKER
        or SAFETY_MARKER in text
    ):
        return GenerationError(ErrorKind.SAFETY_BLOCKED, SAFETY_MESSAGE, context)

    if payload is not None and payload.get("message"):
        return GenerationError(
            ErrorKind.REMOTE_API_ERROR, f"API Error: {payload['message']}", context
        )

    if isinstance(failure, EmptyResponseError):
        return GenerationError(ErrorKind.EMPTY_RESPONSE, EMPTY_RESPONSE_MESSAGE, context)

    detail = str(failure).strip() if isinstance(failure, BaseException) else ""
    if detail:
        message = f"An error occurred during {context}: {detail}"
    else:
        message = f"An unknown error occurred during {context}."
    return GenerationError(ErrorKind.UNKNOWN, message, context)
