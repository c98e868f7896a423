# orderflow

Order and payment handling built around small domain services, with SQL
storage through SQLAlchemy and a JSON interface served as a WSGI application
through Werkzeug.

## What is in the package

| Module                     | Contents |
|----------------------------|----------|
| `orderflow.order_domain`   | `OrderDO` aggregate with `OrderItemDO` lines, `OrderStatus`, `order_status_detail`, the `OrderRepository` protocol and `OrderDomainService` |
| `orderflow.payment_domain` | `PaymentDO`, `PaymentStatus`, `PaymentChannel`, `payment_status_detail`, `payment_channel_detail`, the `PaymentRepository` protocol and `PaymentDomainService` |
| `orderflow.product`        | `Product`, `ProductStatus`, `product_status_detail`, `ValidateProductRequest`, `ValidateProductResponse` and the `ProductService` protocol |
| `orderflow.payment_proxy`  | the `PaymentProxy` protocol for an external payment system |
| `orderflow.payment_service`| `PaymentService`: records a payment and starts it through a `PaymentProxy` |
| `orderflow.order_service`  | `OrderService`: create, get, cancel, pay and update orders |
| `orderflow.database`       | `MySQLConfig`, `init_database`, `create_tables` and the table definitions |
| `orderflow.repository`     | `SqlOrderRepository` and `SqlPaymentRepository` |
| `orderflow.dto`            | request and response objects of the HTTP interface |
| `orderflow.handler`        | `OrderHandler` and `create_app` |
| `orderflow.money`          | conversions between yuan and integer cents |
| `orderflow.event`          | `EventBus`, an in-process event dispatcher |
| `orderflow.errors`         | the exceptions, all derived from `OrderFlowError` |

Amounts are kept in integer cents everywhere except the HTTP/JSON layer,
which speaks in yuan. `convert_float_to_cent` and
`convert_string_float_to_cent` truncate toward zero.

## Wiring it together

`ProductService` and `PaymentProxy` describe external systems; the package
ships no implementation of either, so you supply objects with
`validate_product(request)` and with `create_payment(order_id, amount)` /
`query_payment_status(payment_id)`.

```python
from werkzeug.serving import run_simple

from orderflow.database import create_tables, init_database
from orderflow.handler import OrderHandler, create_app
from orderflow.order_domain import OrderDomainService
from orderflow.order_service import OrderService
from orderflow.payment_domain import PaymentDomainService, PaymentStatus
from orderflow.payment_service import PaymentService
from orderflow.product import Product, ValidateProductResponse


class AcceptEverything:
    def validate_product(self, request):
        return ValidateProductResponse(product=Product(id=request.product_id), is_valid=True)


class FakeGateway:
    def create_payment(self, order_id, amount):
        return f"txn-{order_id}"

    def query_payment_status(self, payment_id):
        return PaymentStatus.COMPLETED


engine = init_database("sqlite:///orders.db")
create_tables(engine)

from orderflow.repository import SqlOrderRepository, SqlPaymentRepository

payments = PaymentService(PaymentDomainService(SqlPaymentRepository(engine)), FakeGateway())
orders = OrderService(OrderDomainService(SqlOrderRepository(engine)), payments, AcceptEverything())

app = create_app(OrderHandler(orders))
run_simple("127.0.0.1", 8000, app)
```

`init_database` opens a test connection before returning the engine. An
in-memory SQLite URL gets one shared connection, so every repository sees the
same database. For MySQL, `MySQLConfig(username=..., password=..., host=...,
port=..., db_name=...).dsn()` builds a `mysql+pymysql://...?charset=utf8mb4`
URL; the MySQL driver itself is not a dependency and has to be installed
separately.

## Behaviour worth knowing

- `OrderService.create_order` validates only the first item with the
  `ProductService` and stores an order holding that one item, with a new UUID
  as its id.
- `OrderService.pay_order` requires the order to be `CREATED`. It reuses an
  existing payment in `CREATED` or `PENDING` state, refuses one that is `PAID`
  (`PaymentAlreadyPaidError`) or in any other state
  (`InvalidPaymentStatusError`), and otherwise creates a payment in `CNY` on
  channel `1`. The order then moves to `PENDING`.
- A payment's id is its order's id. If the gateway fails, the payment is
  marked `FAILED` and the gateway's error is raised.
- `SqlOrderRepository.save` writes the order and replaces its items in one
  transaction. An order with a non-zero `version` is written only if the
  stored version matches; otherwise `VersionConflictError` is raised. The new
  version is copied back onto the order.
- `EventBus.publish` runs each handler registered for the event's `name` in
  its own thread and waits for all of them; handler errors are logged and
  otherwise ignored.

## HTTP endpoints

Every endpoint reads a JSON body, whatever the HTTP method.

| Path                 | Body                                                  | Success                        |
|----------------------|-------------------------------------------------------|--------------------------------|
| `/api/orders/create` | `customer_id`, `items` (yuan amounts)                 | `201` with `{"order_id": ...}` |
| `/api/orders/list`   | `order_id`                                            | `200` with the order           |
| `/api/orders/pay`    | `order_id`                                            | `200` with a message           |
| `/api/orders/update` | `order_id`, optional `customer_id`, `status`, `items` | `200` with a message           |

Errors come back as plain text:

- a malformed body: `400`; a missing `order_id` on pay: `400`;
- any failure while creating an order: `422`;
- an unknown order on `/list`: `404`; other lookup failures: `500`;
- any failure while paying: `500`;
- on update, a concurrent modification (`VersionConflictError`): `409`, and
  other failures, including an unknown order, `500`;
- any other path: `404`.

On update, sending new `items` recomputes the total from their subtotals;
otherwise the stored total is kept. A `status` naming a known order status
keeps the stored status, while an empty or unrecognised one sets the order to
`unknown`.

## What the package does not do

There is no command-line program and no built-in server: `create_app` returns
a WSGI application to run under a WSGI server of your choice. Configuration
files are not read, and no real product service or payment gateway client is
included.