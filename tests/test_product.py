import pytest

from orderflow.product import (
    Product,
    ProductService,
    ProductStatus,
    ValidateProductRequest,
    ValidateProductResponse,
    product_status_detail,
)


@pytest.mark.parametrize(
    "status, text",
    [
        (ProductStatus.VALID, "有效"),
        (ProductStatus.INVALID, "无效"),
        (ProductStatus.DELETED, "已删除"),
        (ProductStatus.OUT_OF_STOCK, "售罄"),
    ],
)
def test_status_detail(status, text):
    assert product_status_detail(status) == text


def test_status_detail_accepts_plain_int():
    assert product_status_detail(3) == "售罄"


@pytest.mark.parametrize("status", [-1, 4, 99])
def test_status_detail_unknown(status):
    assert product_status_detail(status) == "未知"


def test_product_defaults_to_valid():
    product = Product(id="prod_123")
    assert product.status is ProductStatus.VALID
    assert product_status_detail(product.status) == "有效"


def test_request_defaults():
    request = ValidateProductRequest(product_id="prod_123", price=100, quantity=2)
    assert request.name == ""
    assert (request.price, request.quantity) == (100, 2)


class _StockService:
    def __init__(self, stock):
        self.stock = stock

    def validate_product(self, request):
        product = self.stock.get(request.product_id)
        if product is None:
            return ValidateProductResponse(product=None, is_valid=False, messages="not found")
        return ValidateProductResponse(product=product, is_valid=True)


def test_service_protocol_is_satisfied_by_implementation():
    service = _StockService({"prod_123": Product(id="prod_123")})
    assert isinstance(service, ProductService) is True
    assert isinstance(object(), ProductService) is False
    response = service.validate_product(ValidateProductRequest(product_id="prod_123"))
    assert response.is_valid is True
    assert response.messages == ""
    assert response.product.id == "prod_123"


def test_response_for_unknown_product_carries_message():
    service = _StockService({})
    response = service.validate_product(ValidateProductRequest(product_id="missing"))
    assert response.is_valid is False
    assert response.product is None
    assert response.messages == "not found"