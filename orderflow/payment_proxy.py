"""Interface of the gateway that talks to an external payment system."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from orderflow.payment_domain import PaymentStatus


@runtime_checkable
class PaymentProxy(Protocol):
    """Client of an external payment system."""

    def create_payment(self, order_id: str, amount: int) -> str:
        """Start a payment of an amount in cents and return the transaction id."""

    def query_payment_status(self, payment_id: str) -> PaymentStatus:
        """Return the status the external system reports for a payment."""