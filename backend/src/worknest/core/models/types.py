"""Column types shared by the Worknest models."""

import uuid

from sqlalchemy import String, TypeDecorator
from sqlalchemy.dialects.postgresql import UUID as PG_UUID


def _as_uuid(value) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class GUID(TypeDecorator):
    """UUID column: native ``uuid`` on PostgreSQL, 36-char text elsewhere.

    Values always come back as ``uuid.UUID``, including from the recursive
    folder query where SQLite hands back plain strings. Ids bound as
    strings are accepted and normalised.
    """

    impl = String(36)
    cache_ok = True

    @property
    def python_type(self):
        return uuid.UUID

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = _as_uuid(value)
        return value if dialect.name == "postgresql" else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else _as_uuid(value)
