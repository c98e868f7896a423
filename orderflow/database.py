"""Database connection settings, engine creation and the table schema."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
)
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool

metadata = MetaData()

orders_table = Table(
    "t_order",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("customer_id", String(64), nullable=False, default=""),
    Column("status", String(32), nullable=False, default=""),
    Column("total_amount", BigInteger, nullable=False, default=0),
    Column("created_at", DateTime, nullable=True),
    Column("updated_at", DateTime, nullable=True),
    Column("version", BigInteger, nullable=False, default=0),
)

order_items_table = Table(
    "t_order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String(64), nullable=False, index=True),
    Column("product_id", String(64), nullable=False, default=""),
    Column("quantity", BigInteger, nullable=False, default=0),
    Column("unit_price", BigInteger, nullable=False, default=0),
    Column("subtotal", BigInteger, nullable=False, default=0),
)

payments_table = Table(
    "t_payment",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("order_id", String(64), nullable=False, index=True),
    Column("amount", BigInteger, nullable=False, default=0),
    Column("currency", String(16), nullable=False, default=""),
    Column("channel", Integer, nullable=False, default=0),
    Column("status", Integer, nullable=False, default=0),
    Column("transaction_id", String(128), nullable=False, default=""),
    Column("refund_transaction_id", String(128), nullable=False, default=""),
    Column("created_at", DateTime, nullable=True),
    Column("updated_at", DateTime, nullable=True),
    Column("completed_at", DateTime, nullable=True),
)


@dataclass
class MySQLConfig:
    """Connection settings of a MySQL server."""

    username: str
    password: str
    host: str = "localhost"
    port: int = 3306
    db_name: str = ""
    timeout: int = 0
    driver: str = "pymysql"

    def dsn(self) -> str:
        """Return the connection URL of these settings."""
        query = {"charset": "utf8mb4"}
        if self.timeout > 0:
            query["connect_timeout"] = str(self.timeout)
        url = URL.create(
            f"mysql+{self.driver}",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.db_name or None,
            query=query,
        )
        return url.render_as_string(hide_password=False)


def init_database(url: str | URL) -> Engine:
    """Create an engine for ``url`` and check that a connection can be opened.

    An in-memory SQLite URL gets a single shared connection so that every
    caller sees the same database.
    """
    parsed = make_url(url)
    options: dict = {}
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_engine(parsed, **options)
    try:
        with engine.connect():
            pass
    except Exception:
        engine.dispose()
        raise
    return engine


def create_tables(engine: Engine) -> None:
    """Create the order, order item and payment tables where they are missing."""
    metadata.create_all(engine)