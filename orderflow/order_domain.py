"""Order aggregate, order repository interface and order domain service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Protocol, runtime_checkable

from orderflow.errors import OrderRuleError


class OrderStatus(str, Enum):
    UNKNOWN = "unknown"
    CREATED = "created"
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_STATUS_DETAILS = {
    OrderStatus.CREATED: "已创建",
    OrderStatus.PENDING: "待支付",
    OrderStatus.PAID: "已支付",
    OrderStatus.SHIPPED: "已发货",
    OrderStatus.COMPLETED: "已完成",
    OrderStatus.CANCELLED: "已取消",
}


def order_status_detail(status: str) -> str:
    """Return the display text of an order status, "未知" if unrecognised."""
    try:
        return _STATUS_DETAILS.get(OrderStatus(status), "未知")
    except ValueError:
        return "未知"


@dataclass
class OrderItemDO:
    """One line of an order; amounts are in cents."""

    product_id: str = ""
    quantity: int = 0
    unit_price: int = 0
    subtotal: int = 0
    order_id: str = ""


@dataclass
class OrderDO:
    """The order aggregate root; amounts are in cents."""

    id: str = ""
    customer_id: str = ""
    items: list[OrderItemDO] = field(default_factory=list)
    status: OrderStatus = OrderStatus.UNKNOWN
    total_amount: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    def validate(self) -> None:
        """Check the rules an order must meet to be created."""
        if not self.customer_id:
            raise OrderRuleError("客户ID不能为空")
        if not self.items:
            raise OrderRuleError("订单商品不能为空")
        self._check_items(self.items)

    def validate_update(self) -> None:
        """Check the rules an order must meet to be updated."""
        if not self.id:
            raise OrderRuleError("订单ID不能为空")
        self._check_items(self.items)

    def _check_items(self, items: Iterable[OrderItemDO]) -> None:
        calculated_total = 0
        for item in items:
            if not item.product_id:
                raise OrderRuleError("商品ID不能为空")
            if item.quantity <= 0:
                raise OrderRuleError("商品数量必须大于0")
            if item.unit_price < 0:
                raise OrderRuleError("商品单价不能为负数")
            calculated_total += item.subtotal
        if self.total_amount != calculated_total:
            raise OrderRuleError("订单总金额与商品小计之和不匹配")

    def can_be_cancelled(self) -> bool:
        return self.status in (OrderStatus.CREATED, OrderStatus.PAID)

    def cancel(self) -> None:
        if not self.can_be_cancelled():
            raise OrderRuleError("当前订单状态不允许取消")
        self.status = OrderStatus.CANCELLED
        self.updated_at = datetime.now()

    def mark_as_pending_payment(self) -> None:
        """Move a created order to pending payment."""
        if self.status != OrderStatus.CREATED:
            raise OrderRuleError("只有已创建的订单可以标记为待支付")
        self.status = OrderStatus.PENDING
        self.updated_at = datetime.now()

    def mark_as_paid(self) -> None:
        """Move a pending order to paid."""
        if self.status != OrderStatus.PENDING:
            raise OrderRuleError("只有待支付的订单可以标记为已支付")
        self.status = OrderStatus.PAID
        self.updated_at = datetime.now()

    def calculate_total_amount(self) -> None:
        """Set the total to the sum of the item subtotals."""
        self.total_amount = sum(item.subtotal for item in self.items)


@runtime_checkable
class OrderRepository(Protocol):
    """Storage of orders."""

    def save(self, order: OrderDO) -> None:
        """Insert or replace an order together with its items."""

    def find_by_id(self, order_id: str) -> OrderDO:
        """Return the order with the given id, raising if there is none."""


class OrderDomainService:
    """Business rules for creating, paying and updating orders."""

    def __init__(self, repo: OrderRepository) -> None:
        self._repo = repo

    def create_order(self, order: OrderDO) -> None:
        order.validate()
        order.status = OrderStatus.CREATED
        order.created_at = datetime.now()
        order.updated_at = order.created_at
        self._repo.save(order)

    def pay_order(self, order_id: str) -> None:
        order = self._repo.find_by_id(order_id)
        if order.status != OrderStatus.CREATED:
            raise OrderRuleError("只有已创建的订单可以支付")
        order.status = OrderStatus.PAID
        order.updated_at = datetime.now()
        self._repo.save(order)

    def get_order_by_id(self, order_id: str) -> OrderDO:
        return self._repo.find_by_id(order_id)

    def update_order(self, order: OrderDO) -> None:
        order.updated_at = datetime.now()
        self._repo.save(order)