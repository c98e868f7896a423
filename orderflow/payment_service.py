"""Application service that coordinates payment records with the payment gateway."""

from __future__ import annotations

from orderflow.errors import (
    OrderFlowError,
    PaymentError,
    PaymentNotFoundError,
    RecordNotFoundError,
)
from orderflow.payment_domain import PaymentDO, PaymentDomainService
from orderflow.payment_proxy import PaymentProxy


class PaymentService:
    """Creates payments and looks them up for orders."""

    def __init__(self, domain_service: PaymentDomainService, payment_proxy: PaymentProxy) -> None:
        self._domain_service = domain_service
        self._payment_proxy = payment_proxy

    def create_payment(self, order_id: str, amount: int, currency: str, channel: int) -> str:
        """Record a payment, start it with the gateway and return the payment id.

        If the gateway fails, the payment is marked failed and the gateway's
        error is raised.
        """
        payment = self._domain_service.create_payment(order_id, amount, currency, channel)
        try:
            transaction_id = self._payment_proxy.create_payment(order_id, amount)
        except Exception:
            try:
                self._domain_service.process_payment_result(payment.id, "", False)
            except Exception:
                pass
            raise
        self._domain_service.process_payment_result(payment.id, transaction_id, True)
        return payment.id

    def get_payment_by_order_id(self, order_id: str) -> PaymentDO:
        """Return the order's payment, raising PaymentNotFoundError if it has none."""
        try:
            return self._domain_service.get_payment_by_order_id(order_id)
        except RecordNotFoundError as err:
            raise PaymentNotFoundError() from err
        except PaymentNotFoundError:
            raise
        except OrderFlowError as err:
            raise PaymentError(f"查询支付单失败: {err}") from err