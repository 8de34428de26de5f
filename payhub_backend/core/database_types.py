"""Custom database types."""

import uuid

from sqlalchemy import String, TypeDecorator


class UUID(TypeDecorator):
    """UUID stored as CHAR(36).

    Converts between ``uuid.UUID`` objects and strings so the same column
    works on MySQL and SQLite.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, str):
            return uuid.UUID(value)
        return value
