from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for the reservation index tables.

    Only used by the SQL reservation store; the JSON-file store needs no schema.
    """
