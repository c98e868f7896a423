"""Payment domain model, repository interface and domain service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Protocol, runtime_checkable


class PaymentStatus(IntEnum):
    UNKNOWN = 0
    CREATED = 1
    PAID = 2
    REFUNDED = 3
    FAILED = 4
    EXPIRED = 5
    CANCELED = 6
    REFUNDING = 7
    REFUND_FAILED = 8
    REFUNDED_SUCCESS = 9
    COMPLETED = 10
    CLOSED = 11
    PENDING = 12


_STATUS_DETAILS = {
    PaymentStatus.CREATED: "已创建",
    PaymentStatus.PAID: "已支付",
    PaymentStatus.REFUNDED: "已退款",
    PaymentStatus.FAILED: "支付失败",
    PaymentStatus.EXPIRED: "已过期",
    PaymentStatus.CANCELED: "已取消",
    PaymentStatus.REFUNDING: "退款中",
    PaymentStatus.REFUND_FAILED: "退款失败",
    PaymentStatus.REFUNDED_SUCCESS: "退款成功",
    PaymentStatus.COMPLETED: "已完成",
    PaymentStatus.CLOSED: "已关闭",
    PaymentStatus.PENDING: "待支付",
}


class PaymentChannel(IntEnum):
    ALIPAY = 0
    WECHAT = 1
    UNION_PAY = 2
    APPLE_PAY = 3
    JD_PAY = 4


_CHANNEL_DETAILS = {
    PaymentChannel.ALIPAY: "支付宝",
    PaymentChannel.WECHAT: "微信",
    PaymentChannel.UNION_PAY: "银联",
    PaymentChannel.APPLE_PAY: "ApplePay",
    PaymentChannel.JD_PAY: "京东支付",
}


def payment_status_detail(status: int) -> str:
    """Return the display text of a payment status, "未知" if unrecognised."""
    try:
        return _STATUS_DETAILS[PaymentStatus(status)]
    except (ValueError, KeyError):
        return "未知"


def payment_channel_detail(channel: int) -> str:
    """Return the display text of a payment channel, "未知" if unrecognised."""
    try:
        return _CHANNEL_DETAILS[PaymentChannel(channel)]
    except (ValueError, KeyError):
        return "未知"


@dataclass
class PaymentDO:
    id: str
    order_id: str
    amount: int = 0
    currency: str = ""
    channel: int = 0
    status: PaymentStatus = PaymentStatus.UNKNOWN
    transaction_id: str = ""
    refund_transaction_id: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None


@runtime_checkable
class PaymentRepository(Protocol):
    """Storage of payment records."""

    def save(self, payment: PaymentDO) -> None:
        """Insert or replace a payment record."""

    def find_by_id(self, payment_id: str) -> PaymentDO:
        """Return the payment with the given id, raising if there is none."""

    def find_by_order_id(self, order_id: str) -> PaymentDO:
        """Return the payment of the given order, raising if there is none."""


class PaymentDomainService:
    """Business rules for creating and settling payments."""

    def __init__(self, repo: PaymentRepository) -> None:
        self._repo = repo

    def create_payment(
        self, order_id: str, amount: int, currency: str, channel: int
    ) -> PaymentDO:
        """Create and store a new payment whose id is the order id."""
        now = datetime.now()
        payment = PaymentDO(
            id=order_id,
            order_id=order_id,
            amount=amount,
            currency=currency,
            channel=channel,
            status=PaymentStatus.CREATED,
            created_at=now,
            updated_at=now,
        )
        self._repo.save(payment)
        return payment

    def process_payment_result(
        self, payment_id: str, transaction_id: str, success: bool
    ) -> None:
        """Record the outcome reported by the payment gateway."""
        payment = self._repo.find_by_id(payment_id)
        if success:
            payment.status = PaymentStatus.COMPLETED
            payment.transaction_id = transaction_id
            payment.completed_at = datetime.now()
        else:
            payment.status = PaymentStatus.FAILED
        self._repo.save(payment)

    def get_payment_by_order_id(self, order_id: str) -> PaymentDO:
        return self._repo.find_by_order_id(order_id)