"""Request and response objects of the order HTTP interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from orderflow.money import convert_cent_to_float, convert_float_to_cent
from orderflow.order_domain import OrderDO, OrderItemDO, OrderStatus

_ZERO_TIME = "0001-01-01T00:00:00Z"


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _float(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    return float(value)


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be an array")
    return value


def _time(value: datetime | None) -> str:
    return value.isoformat() if value is not None else _ZERO_TIME


@dataclass
class OrderItemRequest:
    """An ordered line; prices are in yuan."""

    product_id: str = ""
    quantity: int = 0
    unit_price: float = 0.0
    subtotal: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> OrderItemRequest:
        data = _mapping(data, "order item")
        return cls(
            product_id=_str(data, "product_id"),
            quantity=_int(data, "quantity"),
            unit_price=_float(data, "unit_price"),
            subtotal=_float(data, "subtotal"),
        )

    def to_domain(self) -> OrderItemDO:
        return OrderItemDO(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=convert_float_to_cent(self.unit_price),
            subtotal=convert_float_to_cent(self.subtotal),
        )


@dataclass
class CreateOrderRequest:
    customer_id: str = ""
    items: list[OrderItemRequest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> CreateOrderRequest:
        """Build a request from decoded JSON, raising ValueError on malformed input."""
        data = _mapping(data, "request")
        return cls(
            customer_id=_str(data, "customer_id"),
            items=[OrderItemRequest.from_dict(item) for item in _list(data, "items")],
        )

    def to_domain(self) -> list[OrderItemDO]:
        """Return the requested items with amounts in cents."""
        return [item.to_domain() for item in self.items]


@dataclass
class OrderItemResponse:
    product_id: str
    quantity: int
    unit_price: float
    subtotal: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "subtotal": self.subtotal,
        }


@dataclass
class OrderResponse:
    """An order as returned to clients; amounts are in yuan."""

    id: str
    customer_id: str
    status: str
    total_amount: float
    created_at: datetime | None
    updated_at: datetime | None
    items: list[OrderItemResponse] = field(default_factory=list)

    @classmethod
    def from_order(cls, order: OrderDO) -> OrderResponse:
        status = order.status
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            status=status.value if isinstance(status, OrderStatus) else str(status),
            total_amount=convert_cent_to_float(order.total_amount),
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=convert_cent_to_float(item.unit_price),
                    subtotal=convert_cent_to_float(item.subtotal),
                )
                for item in order.items
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the response."""
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "status": self.status,
            "total_amount": self.total_amount,
            "created_at": _time(self.created_at),
            "updated_at": _time(self.updated_at),
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class UpdateOrderItemRequest(OrderItemRequest):
    """A replacement order line; prices are in yuan."""


@dataclass
class UpdateOrderRequest:
    order_id: str = ""
    customer_id: str = ""
    status: str = ""
    items: list[UpdateOrderItemRequest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> UpdateOrderRequest:
        """Build a request from decoded JSON, raising ValueError on malformed input."""
        data = _mapping(data, "request")
        return cls(
            order_id=_str(data, "order_id"),
            customer_id=_str(data, "customer_id"),
            status=_str(data, "status"),
            items=[UpdateOrderItemRequest.from_dict(item) for item in _list(data, "items")],
        )

    def to_domain(self) -> OrderDO:
        """Return the order described by the request.

        A status that names no known order status becomes UNKNOWN.
        """
        try:
            status = OrderStatus(self.status)
        except ValueError:
            status = OrderStatus.UNKNOWN
        return OrderDO(
            id=self.order_id,
            customer_id=self.customer_id,
            status=status,
            items=[item.to_domain() for item in self.items],
        )