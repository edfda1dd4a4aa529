"""
Version tags for optimistic concurrency.

A resource tag is derived from the order's version alone; the collection tag
from the member count and every member's (id, version) pair. Tags are only
ever compared for equality.
"""
import hashlib
from dataclasses import dataclass
from typing import Iterable

from .models import Order


@dataclass(frozen=True)
class ETag:
    value: str

    def __str__(self):
        return self.value

    def matches(self, candidate: str | None) -> bool:
        """True when ``candidate`` (an opaque header value) names this tag."""
        if candidate is None:
            return False
        return candidate.strip() == self.value


def resource_tag(order: Order) -> ETag:
    return ETag(f'W/"{order.version}"')


def collection_tag(orders: Iterable[Order]) -> ETag:
    digest = hashlib.sha1()
    count = 0
    for order in orders:
        digest.update(f"{order.id}:{order.version};".encode("utf-8"))
        count += 1
    return ETag(f'W/"{count}-{digest.hexdigest()[:16]}"')


def is_not_modified(current: ETag, if_none_match: str | None) -> bool:
    """Conditional read: the caller's cached copy is still current."""
    return current.matches(if_none_match)


def is_stale(current: ETag, if_match: str | None) -> bool:
    """Conditional write: a supplied tag that differs from the current one.

    No tag at all means the write is unconditional.
    """
    return if_match is not None and not current.matches(if_match)
