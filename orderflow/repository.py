"""SQL storage of orders and payments."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine

from orderflow.database import order_items_table, orders_table, payments_table
from orderflow.errors import OrderNotFoundError, RecordNotFoundError, VersionConflictError
from orderflow.order_domain import OrderDO, OrderItemDO, OrderStatus
from orderflow.payment_domain import PaymentDO, PaymentStatus


def _status_value(status: Any) -> str:
    return getattr(status, "value", status) or ""


def _order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        return OrderStatus.UNKNOWN


def _payment_status(value: int) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        return PaymentStatus.UNKNOWN


class SqlOrderRepository:
    """Orders kept in the t_order and t_order_items tables."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, order: OrderDO) -> None:
        """Insert or update the order and replace its items, in one transaction.

        An order carrying a non-zero version is only written if the stored
        version still matches; otherwise VersionConflictError is raised.
        The stored version is bumped on every write and copied back to ``order``.
        """
        row = {
            "customer_id": order.customer_id,
            "status": _status_value(order.status),
            "total_amount": order.total_amount,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
        with self._engine.begin() as conn:
            version_of = select(orders_table.c.version).where(orders_table.c.id == order.id)
            current = conn.execute(version_of).scalar_one_or_none()
            if current is None:
                conn.execute(insert(orders_table).values(id=order.id, version=1, **row))
                new_version = 1
            else:
                stmt = update(orders_table).where(orders_table.c.id == order.id)
                if order.version:
                    stmt = stmt.where(orders_table.c.version == order.version)
                result = conn.execute(
                    stmt.values(version=orders_table.c.version + 1, **row)
                )
                if result.rowcount == 0:
                    raise VersionConflictError()
                new_version = conn.execute(version_of).scalar_one()

            conn.execute(
                delete(order_items_table).where(order_items_table.c.order_id == order.id)
            )
            if order.items:
                conn.execute(
                    insert(order_items_table),
                    [
                        {
                            "order_id": order.id,
                            "product_id": item.product_id,
                            "quantity": item.quantity,
                            "unit_price": item.unit_price,
                            "subtotal": item.subtotal,
                        }
                        for item in order.items
                    ],
                )
        order.version = new_version

    def find_by_id(self, order_id: str) -> OrderDO:
        """Return the order with its items, raising OrderNotFoundError if absent."""
        with self._engine.connect() as conn:
            row = conn.execute(
                select(orders_table).where(orders_table.c.id == order_id)
            ).first()
            if row is None:
                raise OrderNotFoundError()
            item_rows = conn.execute(
                select(
                    order_items_table.c.product_id,
                    order_items_table.c.quantity,
                    order_items_table.c.unit_price,
                    order_items_table.c.subtotal,
                )
                .where(order_items_table.c.order_id == order_id)
                .order_by(order_items_table.c.id)
            ).all()
        return OrderDO(
            id=row.id,
            customer_id=row.customer_id,
            status=_order_status(row.status),
            total_amount=row.total_amount,
            created_at=row.created_at,
            updated_at=row.updated_at,
            version=row.version,
            items=[
                OrderItemDO(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in item_rows
            ],
        )


class SqlPaymentRepository:
    """Payments kept in the t_payment table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, payment: PaymentDO) -> None:
        """Insert the payment, or overwrite the stored one with the same id."""
        row = {
            "order_id": payment.order_id,
            "amount": payment.amount,
            "currency": payment.currency,
            "channel": int(payment.channel),
            "status": int(payment.status),
            "transaction_id": payment.transaction_id,
            "refund_transaction_id": payment.refund_transaction_id,
            "created_at": payment.created_at,
            "updated_at": payment.updated_at,
            "completed_at": payment.completed_at,
        }
        with self._engine.begin() as conn:
            result = conn.execute(
                update(payments_table).where(payments_table.c.id == payment.id).values(**row)
            )
            if result.rowcount == 0:
                conn.execute(insert(payments_table).values(id=payment.id, **row))

    def find_by_id(self, payment_id: str) -> PaymentDO:
        """Return the payment with the given id, raising RecordNotFoundError if absent."""
        return self._find_one(payments_table.c.id == payment_id)

    def find_by_order_id(self, order_id: str) -> PaymentDO:
        """Return the payment of the given order, raising RecordNotFoundError if absent."""
        return self._find_one(payments_table.c.order_id == order_id)

    def _find_one(self, condition: Any) -> PaymentDO:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(payments_table).where(condition).order_by(payments_table.c.id).limit(1)
            ).first()
        if row is None:
            raise RecordNotFoundError()
        return PaymentDO(
            id=row.id,
            order_id=row.order_id,
            amount=row.amount,
            currency=row.currency,
            channel=row.channel,
            status=_payment_status(row.status),
            transaction_id=row.transaction_id,
            refund_transaction_id=row.refund_transaction_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed_at=row.completed_at,
        )