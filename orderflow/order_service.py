"""Application service that coordinates orders, products and payments."""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from orderflow.errors import (
    InvalidPaymentStatusError,
    OrderFlowError,
    OrderRuleError,
    PaymentAlreadyPaidError,
    PaymentError,
    PaymentNotFoundError,
    VersionConflictError,
)
from orderflow.order_domain import (
    OrderDO,
    OrderDomainService,
    OrderItemDO,
    OrderStatus,
    order_status_detail,
)
from orderflow.payment_domain import PaymentStatus, payment_status_detail
from orderflow.payment_service import PaymentService
from orderflow.product import ProductService, ProductStatus, ValidateProductRequest

_log = logging.getLogger(__name__)

_DEFAULT_CURRENCY = "CNY"
_DEFAULT_CHANNEL = 1


def _rewrap(
    prefix: str, err: Exception, fallback: type[OrderFlowError] = OrderFlowError
) -> OrderFlowError:
    """Return an error of the same kind as ``err`` with ``prefix`` in front of its message."""
    message = f"{prefix}: {err}"
    if isinstance(err, OrderFlowError):
        return type(err)(message)
    return fallback(message)


class OrderService:
    """Use cases of the order application: create, read, cancel, pay and update."""

    def __init__(
        self,
        order_domain_service: OrderDomainService,
        payment_service: PaymentService | None,
        product_service: ProductService | None,
    ) -> None:
        self._orders = order_domain_service
        self._payments = payment_service
        self._products = product_service

    def create_order(self, customer_id: str, items: Sequence[OrderItemDO]) -> str:
        """Validate the ordered product, store a new order and return its id.

        Only the first item is taken into the order.
        """
        if not items:
            raise OrderRuleError("订单商品不能为空")
        if self._products is None:
            raise OrderFlowError("product service is not configured")
        first = items[0]
        response = self._products.validate_product(
            ValidateProductRequest(
                product_id=first.product_id,
                name="",
                price=first.unit_price,
                quantity=first.quantity,
            )
        )
        if not response.is_valid:
            raise OrderRuleError(response.messages)
        product = response.product
        if product is None or product.status != ProductStatus.VALID:
            raise OrderRuleError("product is not available")

        order = OrderDO(
            id=str(uuid.uuid4()),
            customer_id=customer_id,
            status=OrderStatus.CREATED,
            items=[
                OrderItemDO(
                    product_id=product.id,
                    quantity=first.quantity,
                    unit_price=first.unit_price,
                    subtotal=first.subtotal,
                )
            ],
            total_amount=first.subtotal,
        )
        self._orders.create_order(order)
        return order.id

    def get_order(self, order_id: str) -> OrderDO:
        return self._orders.get_order_by_id(order_id)

    def cancel_order(self, order_id: str) -> None:
        order = self._orders.get_order_by_id(order_id)
        order.cancel()
        self._orders.update_order(order)

    def pay_order(self, order_id: str) -> None:
        """Attach a payment to a created order and move the order to pending payment."""
        if self._payments is None:
            raise OrderFlowError("payment service is not configured")
        order = self._orders.get_order_by_id(order_id)

        if order.status != OrderStatus.CREATED:
            raise OrderRuleError(
                f"订单状态异常，当前状态: {order_status_detail(order.status)},无法发起支付"
            )

        try:
            existing = self._payments.get_payment_by_order_id(order.id)
        except PaymentNotFoundError:
            existing = None

        if existing is not None:
            if existing.status == PaymentStatus.PAID:
                raise PaymentAlreadyPaidError()
            if existing.status not in (PaymentStatus.PENDING, PaymentStatus.CREATED):
                raise InvalidPaymentStatusError(
                    f"支付单状态异常: {payment_status_detail(existing.status)}"
                )
            payment_id = existing.id
        else:
            try:
                payment_id = self._payments.create_payment(
                    order.id, order.total_amount, _DEFAULT_CURRENCY, _DEFAULT_CHANNEL
                )
            except Exception as err:
                raise _rewrap("创建支付单失败", err, PaymentError) from err

        try:
            order.mark_as_pending_payment()
        except OrderFlowError as err:
            raise _rewrap("更新订单为待支付状态失败", err) from err

        try:
            self._orders.update_order(order)
        except OrderFlowError as err:
            raise _rewrap("保存订单状态失败", err) from err

        if payment_id:
            _log.info("支付链接或支付处理信息: %s", payment_id)

    def update_order(self, order: OrderDO) -> None:
        """Persist changes to an order.

        A lost optimistic-lock race raises VersionConflictError.
        """
        try:
            self._orders.update_order(order)
        except VersionConflictError as err:
            raise VersionConflictError(
                f"订单已被其他操作更新，请刷新后重试: {err}"
            ) from err
        except OrderFlowError as err:
            raise _rewrap("更新订单失败", err) from err