"""HTTP endpoints of the order application."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from werkzeug.wrappers import Request, Response

from orderflow.dto import CreateOrderRequest, OrderResponse, UpdateOrderRequest
from orderflow.errors import RecordNotFoundError, VersionConflictError
from orderflow.order_domain import OrderStatus
from orderflow.order_service import OrderService

_DECODER = json.JSONDecoder()


def _decode_body(request: Request) -> Any:
    """Decode the first JSON value of the request body."""
    text = request.get_data(as_text=True).lstrip()
    if not text:
        raise ValueError("EOF")
    value, _ = _DECODER.raw_decode(text)
    return value


def _order_id_of(data: Any) -> str:
    if data is None:
        return ""
    if not isinstance(data, Mapping):
        raise ValueError("request must be a JSON object")
    order_id = data.get("order_id")
    if order_id is None:
        return ""
    if not isinstance(order_id, str):
        raise ValueError("field 'order_id' must be a string")
    return order_id


def _error(message: str, status: int) -> Response:
    return Response(
        message + "\n",
        status=status,
        content_type="text/plain; charset=utf-8",
        headers={"X-Content-Type-Options": "nosniff"},
    )


def _json(payload: Any, status: int) -> Response:
    return Response(
        json.dumps(payload, ensure_ascii=False) + "\n",
        status=status,
        mimetype="application/json",
    )


def _bad_request(err: Exception) -> Response:
    return _error(f"无效的请求格式: {err}", 400)


class OrderHandler:
    """Turns HTTP requests into order use cases."""

    def __init__(self, order_service: OrderService) -> None:
        self._service = order_service

    def create_order(self, request: Request) -> Response:
        try:
            body = _decode_body(request)
            req = CreateOrderRequest.from_dict({} if body is None else body)
        except ValueError as err:
            return _bad_request(err)

        try:
            order_id = self._service.create_order(req.customer_id, req.to_domain())
        except Exception as err:
            return _error(f"创建订单失败: {err}", 422)
        return _json({"order_id": order_id}, 201)

    def get_order(self, request: Request) -> Response:
        try:
            order_id = _order_id_of(_decode_body(request))
        except ValueError as err:
            return _bad_request(err)

        try:
            order = self._service.get_order(order_id)
        except Exception as err:
            if str(err) == "订单不存在":
                return _error("订单不存在", 404)
            return _error(f"获取订单失败: {err}", 500)
        return _json(OrderResponse.from_order(order).to_dict(), 200)

    def pay_order(self, request: Request) -> Response:
        try:
            order_id = _order_id_of(_decode_body(request))
        except ValueError as err:
            return _bad_request(err)
        if not order_id:
            return _error("订单ID不能为空", 400)

        try:
            self._service.pay_order(order_id)
        except Exception as err:
            return _error(f"支付失败: {err}", 500)
        return _json({"message": "支付成功"}, 200)

    def update_order(self, request: Request) -> Response:
        try:
            body = _decode_body(request)
            req = UpdateOrderRequest.from_dict({} if body is None else body)
        except ValueError as err:
            return _bad_request(err)

        try:
            existing = self._service.get_order(req.order_id)
        except Exception as err:
            if isinstance(err, RecordNotFoundError):
                return _error("订单不存在", 404)
            return _error(f"查询订单失败: {err}", 500)

        order = req.to_domain()
        if not order.customer_id:
            order.customer_id = existing.customer_id
        order.created_at = existing.created_at
        order.updated_at = datetime.now()
        if order.status != OrderStatus.UNKNOWN:
            order.status = existing.status

        if req.items:
            order.calculate_total_amount()
        else:
            order.total_amount = existing.total_amount

        try:
            self._service.update_order(order)
        except Exception as err:
            if isinstance(err, VersionConflictError):
                return _error("订单已被其他操作更新，请刷新后重试", 409)
            return _error(f"更新订单失败: {err}", 500)
        return _json({"message": "订单更新成功"}, 200)


def create_app(handler: OrderHandler) -> Callable:
    """Return a WSGI application serving the order endpoints of ``handler``."""
    routes: dict[str, Callable[[Request], Response]] = {
        "/api/orders/create": handler.create_order,
        "/api/orders/list": handler.get_order,
        "/api/orders/pay": handler.pay_order,
        "/api/orders/update": handler.update_order,
    }

    @Request.application
    def app(request: Request) -> Response:
        endpoint = routes.get(request.path)
        if endpoint is None:
            return _error("404 page not found", 404)
        return endpoint(request)

    return app