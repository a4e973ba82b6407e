"""ORM Base — declarative base whose metadata creates the storage tables.

Invariants:
    - Every model registers on Base.metadata; create_tables reads only that
    - Constraint and index names follow NAMING_CONVENTION
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
