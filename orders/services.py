"""
Order service: create, list, get, update, cancel and delete.

Each operation is all-or-nothing. Conditional reads short-circuit to a
not-modified result; conditional writes are checked inside the store's
critical section. Events are published only after a change is committed and
the record lock has been released.
"""
import logging
from dataclasses import dataclass

from . import publisher as default_publisher
from .etags import ETag, is_not_modified, resource_tag
from .models import Order, OrderStatus
from .store import OrderStore
from .validators import CreateOrderCommand, UpdateOrderCommand, validate_status_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderResult:
    order: Order | None
    etag: ETag
    not_modified: bool = False
    changed: bool = True

    @property
    def location(self) -> str:
        return f"/orders/{self.order.id}"


@dataclass(frozen=True)
class OrderListResult:
    orders: list[Order] | None
    etag: ETag
    not_modified: bool = False


class OrderService:
    def __init__(self, store: OrderStore | None = None, publisher=default_publisher):
        self.store = store if store is not None else OrderStore()
        self.publisher = publisher

    def create_order(self, command: CreateOrderCommand) -> OrderResult:
        order = self.store.create(command.to_draft())
        logger.info("Order %s created for user %s (status=%s)", order.id, order.user_id, order.status)
        self.publisher.publish_order_created(order.id, order.status, order.version)
        return OrderResult(order=order, etag=resource_tag(order))

    def list_orders(self, if_none_match: str | None = None) -> OrderListResult:
        orders, tag = self.store.list_with_tag()
        if is_not_modified(tag, if_none_match):
            return OrderListResult(orders=None, etag=tag, not_modified=True)
        return OrderListResult(orders=orders, etag=tag)

    def get_order(self, order_id: str, if_none_match: str | None = None) -> OrderResult:
        order = self.store.get(order_id)
        tag = resource_tag(order)
        if is_not_modified(tag, if_none_match):
            return OrderResult(order=None, etag=tag, not_modified=True, changed=False)
        return OrderResult(order=order, etag=tag, changed=False)

    def update_order(self, order_id: str, command: UpdateOrderCommand,
                     if_match: str | None = None) -> OrderResult:
        changed_fields: list[str] = []

        def apply(order: Order) -> bool:
            # all checks run before the working copy is touched
            if command.status is not None:
                validate_status_transition(order.status, command.status)
            if command.status is not None and command.status != order.status:
                order.status = command.status
                changed_fields.append("status")
            if command.amount is not None and command.amount != order.amount:
                order.amount = command.amount
                changed_fields.append("amount")
            if command.user_id is not None and command.user_id != order.user_id:
                order.user_id = command.user_id
                changed_fields.append("userId")
            return bool(changed_fields)

        order, changed = self.store.mutate(order_id, apply, expected_tag=if_match)
        if changed:
            logger.info("Order %s updated to version %d (%s)", order.id, order.version, ", ".join(changed_fields))
            self.publisher.publish_order_updated(order.id, order.status, order.version, changed_fields)
            if "status" in changed_fields:
                self.publisher.publish_order_status_updated(order.id, order.status, order.version)
        return OrderResult(order=order, etag=resource_tag(order), changed=changed)

    def cancel_order(self, order_id: str, if_match: str | None = None) -> OrderResult:
        def apply(order: Order) -> bool:
            validate_status_transition(order.status, OrderStatus.CANCELED)
            if order.status == OrderStatus.CANCELED:
                return False
            order.status = OrderStatus.CANCELED
            return True

        order, changed = self.store.mutate(order_id, apply, expected_tag=if_match)
        if changed:
            logger.info("Order %s canceled (version %d)", order.id, order.version)
            self.publisher.publish_order_canceled(order.id, order.version)
        return OrderResult(order=order, etag=resource_tag(order), changed=changed)

    def delete_order(self, order_id: str) -> None:
        self.store.delete(order_id)
        logger.info("Order %s deleted", order_id)
        self.publisher.publish_order_deleted(order_id)
