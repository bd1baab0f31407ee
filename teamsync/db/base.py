# teamsync/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the TeamSync service.
    """
    pass


# Import ORM models so that Base.metadata is aware of them
# This import should stay at the bottom to avoid circular dependencies.
from teamsync.models.document import StoredDocument  # noqa: E402,F401
