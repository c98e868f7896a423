"""Exceptions raised by the order and payment domains."""

from __future__ import annotations


class OrderFlowError(Exception):
    """Base class of all errors raised by this package."""

    default_message = "order flow error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class RecordNotFoundError(OrderFlowError):
    """A storage lookup found no matching record."""

    default_message = "record not found"


class VersionConflictError(OrderFlowError):
    """A write lost an optimistic-lock race against another update."""

    default_message = "duplicated key not allowed"


class OrderNotFoundError(OrderFlowError):
    """The requested order does not exist."""

    default_message = "订单不存在"


class OrderRuleError(OrderFlowError):
    """An order violates a business rule."""

    default_message = "订单业务规则校验失败"


class PaymentError(OrderFlowError):
    """Base class of payment domain errors."""

    default_message = "payment error"


class PaymentNotFoundError(PaymentError):
    default_message = "payment not found"


class PaymentAlreadyExistsError(PaymentError):
    default_message = "payment already exists"


class InvalidPaymentStatusError(PaymentError):
    default_message = "invalid payment status"


class PaymentAmountMismatchError(PaymentError):
    default_message = "payment amount mismatch"


class PaymentAlreadyPaidError(PaymentError):
    default_message = "订单已支付，无需重复操作"