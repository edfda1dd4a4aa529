import json
import math
from dataclasses import dataclass
from typing import Any

from .errors import ConflictError, ValidationError
from .models import OrderDraft, OrderStatus


class BadJSON(Exception):
    """Raised when the request body is not valid JSON."""
    pass


def parse_json_body(request):
    """
    Decode the request body as JSON.
    An empty body decodes to an empty dict. Raises BadJSON on failure.
    """
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
        return json.loads(body or "{}")
    except (UnicodeDecodeError, ValueError) as e:
        raise BadJSON(f"invalid JSON: {e}")


# current -> statuses it may move to. Same-state is always allowed.
_ALLOWED_TRANSITIONS = {
    OrderStatus.CREATED:  {OrderStatus.CREATED, OrderStatus.PAID, OrderStatus.CANCELED},
    OrderStatus.PAID:     {OrderStatus.PAID},
    OrderStatus.CANCELED: {OrderStatus.CANCELED},
}

_REJECTION_REASONS = {
    OrderStatus.PAID: "cannot modify a paid order",
    OrderStatus.CANCELED: "cannot reopen a canceled order",
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Check a status change against the lifecycle graph.
    Raises ConflictError when the move is not allowed from ``current_status``.
    """
    allowed = _ALLOWED_TRANSITIONS.get(current_status, set())
    if new_status not in allowed:
        reason = _REJECTION_REASONS.get(
            current_status, f"cannot move from {current_status} to {new_status}"
        )
        raise ConflictError(reason)
    return True


def validate_status(value: Any) -> str:
    if not isinstance(value, str) or value not in OrderStatus.ALL:
        raise ValidationError(
            f"invalid status (valid: {', '.join(OrderStatus.ALL)})", field="status"
        )
    return value


def validate_user_id(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("userId is required (non-empty string)", field="userId")
    return value


def validate_amount(value: Any) -> float:
    # bool is an int subclass; JSON true/false is not an amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("amount must be a number >= 0", field="amount")
    # large JSON integers stay ints; only floats can be nan or inf
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError("amount must be a number >= 0", field="amount")
    if value < 0:
        raise ValidationError("amount must be a number >= 0", field="amount")
    return value


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


@dataclass(frozen=True)
class CreateOrderCommand:
    user_id: str
    amount: float
    status: str = OrderStatus.CREATED
    items: list[Any] | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateOrderCommand":
        payload = _require_object(payload)
        user_id = validate_user_id(payload.get("userId"))
        amount = validate_amount(payload.get("amount"))
        status = payload.get("status")
        status = OrderStatus.CREATED if status is None else validate_status(status)
        items = payload.get("items")
        return cls(
            user_id=user_id,
            amount=amount,
            status=status,
            items=list(items) if isinstance(items, list) else None,
        )

    def to_draft(self) -> OrderDraft:
        return OrderDraft(
            user_id=self.user_id, amount=self.amount, status=self.status, items=self.items
        )


@dataclass(frozen=True)
class UpdateOrderCommand:
    """Partial update. ``None`` means the field was not supplied."""

    status: str | None = None
    amount: float | None = None
    user_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateOrderCommand":
        payload = _require_object(payload)
        status = validate_status(payload["status"]) if "status" in payload else None
        amount = validate_amount(payload["amount"]) if "amount" in payload else None
        user_id = validate_user_id(payload["userId"]) if "userId" in payload else None
        return cls(status=status, amount=amount, user_id=user_id)

    def is_empty(self) -> bool:
        return self.status is None and self.amount is None and self.user_id is None
