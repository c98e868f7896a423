from types import SimpleNamespace

import pytest
from werkzeug.test import Client

from orderflow.database import create_tables, init_database
from orderflow.errors import VersionConflictError
from orderflow.handler import OrderHandler, create_app
from orderflow.order_domain import OrderDomainService, OrderStatus
from orderflow.order_service import OrderService
from orderflow.payment_domain import PaymentDomainService, PaymentStatus
from orderflow.payment_service import PaymentService
from orderflow.product import Product, ProductStatus, ValidateProductResponse
from orderflow.repository import SqlOrderRepository, SqlPaymentRepository


class _Products:
    def __init__(self):
        self.unavailable = set()

    def validate_product(self, request):
        if request.product_id in self.unavailable:
            return ValidateProductResponse(product=None, is_valid=False, messages="unavailable")
        return ValidateProductResponse(
            product=Product(id=request.product_id, status=ProductStatus.VALID),
            is_valid=True,
        )


class _Proxy:
    def create_payment(self, order_id, amount):
        return "txn_" + order_id

    def query_payment_status(self, payment_id):
        return PaymentStatus.PAID


class _ConflictingRepository:
    def __init__(self, inner):
        self._inner = inner
        self.conflict = False

    def save(self, order):
        if self.conflict:
            raise VersionConflictError()
        self._inner.save(order)

    def find_by_id(self, order_id):
        return self._inner.find_by_id(order_id)


@pytest.fixture
def env():
    engine = init_database("sqlite://")
    create_tables(engine)
    orders = _ConflictingRepository(SqlOrderRepository(engine))
    payments = PaymentService(PaymentDomainService(SqlPaymentRepository(engine)), _Proxy())
    products = _Products()
    service = OrderService(OrderDomainService(orders), payments, products)
    client = Client(create_app(OrderHandler(service)))
    return SimpleNamespace(client=client, orders=orders, products=products)


ITEM = {"product_id": "prod_123", "quantity": 2, "unit_price": 1.0, "subtotal": 2.0}


def _create(env, customer_id="cust_123", items=(ITEM,)):
    response = env.client.post(
        "/api/orders/create", json={"customer_id": customer_id, "items": list(items)}
    )
    assert response.status_code == 201
    return response.get_json()["order_id"]


def test_create_then_list(env):
    order_id = _create(env)
    response = env.client.post("/api/orders/list", json={"order_id": order_id})
    assert response.status_code == 200
    body = response.get_json()
    assert body["id"] == order_id
    assert body["customer_id"] == "cust_123"
    assert body["status"] == "created"
    assert body["total_amount"] == ITEM["subtotal"]
    assert [item["product_id"] for item in body["items"]] == ["prod_123"]
    assert body["items"][0]["unit_price"] == ITEM["unit_price"]


def test_create_rejects_malformed_json(env):
    response = env.client.post("/api/orders/create", data="{not json")
    assert response.status_code == 400
    assert response.get_data(as_text=True).startswith("无效的请求格式: ")


def test_create_rejects_empty_body(env):
    response = env.client.post("/api/orders/create", data="")
    assert response.status_code == 400


def test_create_reports_invalid_product(env):
    env.products.unavailable.add("prod_123")
    response = env.client.post("/api/orders/create", json={"customer_id": "c", "items": [ITEM]})
    assert response.status_code == 422
    assert response.get_data(as_text=True) == "创建订单失败: unavailable\n"


def test_list_missing_order(env):
    response = env.client.post("/api/orders/list", json={"order_id": "nope"})
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "订单不存在\n"


def test_pay_requires_order_id(env):
    response = env.client.post("/api/orders/pay", json={})
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "订单ID不能为空\n"


def test_pay_moves_order_to_pending(env):
    order_id = _create(env)
    response = env.client.post("/api/orders/pay", json={"order_id": order_id})
    assert response.status_code == 200
    assert response.get_json() == {"message": "支付成功"}
    assert env.orders.find_by_id(order_id).status is OrderStatus.PENDING


def test_pay_twice_fails(env):
    order_id = _create(env)
    env.client.post("/api/orders/pay", json={"order_id": order_id})
    response = env.client.post("/api/orders/pay", json={"order_id": order_id})
    assert response.status_code == 500
    text = response.get_data(as_text=True)
    assert text.startswith("支付失败: 订单状态异常")
    assert "待支付" in text


def test_update_missing_order(env):
    response = env.client.post("/api/orders/update", json={"order_id": "nope"})
    assert response.status_code == 500
    assert response.get_data(as_text=True) == "查询订单失败: 订单不存在\n"


def test_update_replaces_items_and_recalculates(env):
    order_id = _create(env)
    new_item = {"product_id": "prod_456", "quantity": 3, "unit_price": 1.0, "subtotal": 3.0}
    response = env.client.post(
        "/api/orders/update",
        json={"order_id": order_id, "status": "created", "items": [new_item]},
    )
    assert response.status_code == 200
    assert response.get_json() == {"message": "订单更新成功"}
    stored = env.orders.find_by_id(order_id)
    assert stored.customer_id == "cust_123"
    assert stored.status is OrderStatus.CREATED
    assert [item.product_id for item in stored.items] == ["prod_456"]
    assert stored.total_amount == sum(item.subtotal for item in stored.items)


def test_update_without_items_keeps_total(env):
    order_id = _create(env)
    before = env.orders.find_by_id(order_id)
    response = env.client.post("/api/orders/update", json={"order_id": order_id})
    assert response.status_code == 200
    after = env.orders.find_by_id(order_id)
    assert after.total_amount == before.total_amount
    assert after.status is OrderStatus.UNKNOWN


def test_update_conflict(env):
    order_id = _create(env)
    env.orders.conflict = True
    response = env.client.post("/api/orders/update", json={"order_id": order_id})
    assert response.status_code == 409
    assert response.get_data(as_text=True) == "订单已被其他操作更新，请刷新后重试\n"


def test_unknown_path(env):
    response = env.client.post("/api/orders/delete", json={})
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "404 page not found\n"