"""
Validation Utilities for bus payloads

Checks a payload against the TypedDict registered for its channel. Used by the
EventBus when payload validation is enabled and directly by tests.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime

from ava_orchestrator.models.messages import (
    AgentResultPayload,
    TaskUpdatePayload,
    payload_type_for,
)


# ============================================================================
# VALIDATION RESULTS
# ============================================================================

class ValidationResult:
    """Result of a validation check."""

    def __init__(self, valid: bool, errors: Optional[List[str]] = None):
        self.valid = valid
        self.errors = errors or []

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            return "Validation passed"
        return f"Validation failed: {'; '.join(self.errors)}"


# ============================================================================
# CHANNEL PAYLOAD VALIDATION
# ============================================================================

RESULT_STATUSES = {"pending", "in_progress", "completed", "failed", "partial", "routing"}


def validate_channel_payload(channel: str, payload: Any) -> ValidationResult:
    """
    Validate a payload against the type registered for ``channel``.

    Channels without a registered type always pass.

    Args:
        channel: Channel the payload is emitted on
        payload: Payload to validate

    Returns:
        ValidationResult with any errors
    """
    payload_type = payload_type_for(channel)
    if payload_type is None:
        return ValidationResult(valid=True)

    if not isinstance(payload, dict):
        return ValidationResult(
            valid=False,
            errors=[f"Payload for '{channel}' must be a dict, got {type(payload).__name__}"]
        )

    errors = []

    missing_fields = set(payload_type.__required_keys__) - set(payload.keys())
    if missing_fields:
        errors.append(f"Missing required fields: {', '.join(sorted(missing_fields))}")

    if "taskId" in payload and not isinstance(payload["taskId"], str):
        # Broadcast payloads may carry taskId=None
        if payload["taskId"] is not None or "taskId" in payload_type.__required_keys__:
            errors.append("'taskId' must be a string")

    if payload_type in (AgentResultPayload, TaskUpdatePayload):
        status = payload.get("status")
        if status is not None and status not in RESULT_STATUSES:
            errors.append(f"Invalid status: {status}")

    if "toolResults" in payload and not isinstance(payload["toolResults"], list):
        errors.append("'toolResults' must be list")

    if "timestamp" in payload and not _is_valid_iso8601(payload["timestamp"]):
        errors.append(f"Invalid timestamp format: {payload.get('timestamp')}")

    return ValidationResult(valid=len(errors) == 0, errors=errors)


def _is_valid_iso8601(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return True
    except ValueError:
        return False

