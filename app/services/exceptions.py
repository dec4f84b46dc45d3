"""Domain failures raised by the ticketing services.

Each failure carries the HTTP status code the routers answer with, so the
routers only have to translate, never to decide.
"""
from fastapi import status


class TicketingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Ticketing operation failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Forbidden(TicketingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Operation not permitted."


class EventNotFound(TicketingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Event with id {event_id} not found.")


class InvalidQuantity(TicketingError):
    def __init__(self, quantity, maximum: int):
        self.quantity = quantity
        super().__init__(f"Quantity must be between 1 and {maximum}, got {quantity}.")


class InsufficientInventory(TicketingError):
    def __init__(self, event_id, requested: int, available: int):
        self.event_id = event_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough tickets available for event {event_id}: requested {requested}, {available} left."
        )


class InvalidQrFormat(TicketingError):
    default_detail = "Invalid QR code format."


class TicketNotFound(TicketingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, ticket_id):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket with id {ticket_id} not found.")


class AlreadyUsed(TicketingError):
    def __init__(self, ticket_id, used_at=None):
        self.ticket_id = ticket_id
        self.used_at = used_at
        when = f" at {used_at.isoformat()}" if used_at else ""
        super().__init__(f"Ticket {ticket_id} has already been used{when}.")


class TicketVoided(TicketingError):
    def __init__(self, ticket_id, reason):
        self.ticket_id = ticket_id
        self.reason = reason
        super().__init__(f"Ticket {ticket_id} is {getattr(reason, 'value', reason)} and cannot be used.")


class PaymentNotFound(TicketingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, payment_id):
        self.payment_id = payment_id
        super().__init__(f"Payment with id {payment_id} not found.")


class DuplicateTransaction(TicketingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction id {transaction_id} is already recorded.")
