import copy
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any


class OrderStatus:
    CREATED = "created"
    PAID = "paid"
    CANCELED = "canceled"

    ALL = (CREATED, PAID, CANCELED)


@dataclass
class Order:
    """An order plus its version counter for optimistic concurrency."""

    id: str
    user_id: str
    amount: float
    status: str
    created_at: datetime
    items: list[Any] | None = None
    updated_at: datetime | None = None
    canceled_at: datetime | None = None
    version: int = 1

    def snapshot(self) -> "Order":
        """Detached copy handed out to callers; the store keeps the original."""
        return replace(self, items=copy.deepcopy(self.items))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "amount": self.amount,
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
            "version": self.version,
        }
        if self.items is not None:
            data["items"] = self.items
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at.isoformat()
        if self.canceled_at is not None:
            data["canceledAt"] = self.canceled_at.isoformat()
        return data

    def __str__(self):
        return f"{self.id}:{self.status}:{self.version}"


@dataclass(frozen=True)
class OrderDraft:
    """Fields needed to create an order; id, timestamps and version are assigned by the store."""

    user_id: str
    amount: float
    status: str = OrderStatus.CREATED
    items: list[Any] | None = None
