"""Product domain model and the product validation service interface."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, runtime_checkable


class ProductStatus(IntEnum):
    VALID = 0
    INVALID = 1
    DELETED = 2
    OUT_OF_STOCK = 3


_STATUS_DETAILS = {
    ProductStatus.VALID: "有效",
    ProductStatus.INVALID: "无效",
    ProductStatus.DELETED: "已删除",
    ProductStatus.OUT_OF_STOCK: "售罄",
}


def product_status_detail(status: int) -> str:
    """Return the display text of a product status, "未知" if unrecognised."""
    try:
        return _STATUS_DETAILS[ProductStatus(status)]
    except (ValueError, KeyError):
        return "未知"


@dataclass
class Product:
    id: str
    name: str = ""
    status: ProductStatus = ProductStatus.VALID
    price: int = 0


@dataclass
class ValidateProductRequest:
    product_id: str
    name: str = ""
    price: int = 0
    quantity: int = 0


@dataclass
class ValidateProductResponse:
    product: Product | None
    is_valid: bool
    messages: str = ""


@runtime_checkable
class ProductService(Protocol):
    """Checks whether a product may be ordered."""

    def validate_product(self, request: ValidateProductRequest) -> ValidateProductResponse:
        """Validate the requested product and report its current state."""