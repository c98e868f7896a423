"""Order, payment and product domain services with SQL storage and a JSON WSGI interface."""

__version__ = "0.1.0"