"""
Error taxonomy for the order lifecycle.

Every rejected operation raises one of these and leaves the store unchanged.
The HTTP layer maps ``status_code`` straight onto the response.
"""


class OrderError(Exception):
    """Base class for all order errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderError):
    """Malformed input (422)."""
    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(OrderError):
    """Unknown order id (404)."""
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"order not found: {order_id}")
        self.order_id = order_id


class ConflictError(OrderError):
    """Illegal status transition for the current state (409)."""
    status_code = 409


class PreconditionFailedError(OrderError):
    """Supplied tag no longer matches the current one (412)."""
    status_code = 412

    def __init__(self, expected: str, current: str):
        super().__init__(f"precondition failed: expected {expected}, current is {current}")
        self.expected = expected
        self.current = current
