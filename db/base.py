"""
db/base.py

Declarative base for the delivery datastore models.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Keeps constraint names stable between ORM metadata and migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    All models must inherit from this class.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
