"""
Domain Exceptions

Services raise these; the handlers registered in buffetdesk.main turn them
into ``{code, message, requestId}`` responses.
"""


class BuffetDeskError(Exception):
    """Base class for errors with a stable code and HTTP status"""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BuffetDeskError):
    """Malformed or constraint-violating input; nothing was written"""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(BuffetDeskError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id):
        super().__init__(f"{resource} '{resource_id}' not found")
        self.resource = resource
        self.resource_id = resource_id


class InsufficientStockError(ValidationError):
    """An out movement would leave the item with negative stock"""

    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, inventory_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for item '{inventory_id}': "
            f"requested {requested}, available {available}"
        )
        self.inventory_id = inventory_id
        self.requested = requested
        self.available = available


class InfrastructureError(BuffetDeskError):
    """Storage connectivity or timeout failure. Not retried here."""

    code = "INFRASTRUCTURE_ERROR"
    status_code = 503
