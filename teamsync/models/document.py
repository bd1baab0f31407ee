# teamsync/models/document.py
from sqlalchemy import JSON, BigInteger, Column, DateTime, String, func

from teamsync.db.base import Base


class StoredDocument(Base):
    """
    One document of a named collection.

    The document store is schemaless: `data` holds the field set exactly as
    the gateway received it, keyed by (collection, doc_id).
    """

    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True, index=True)
    doc_id = Column(String(128), primary_key=True)

    data = Column(JSON, nullable=False, default=dict)

    # Insertion order within the collection; reads are returned in this order.
    seq = Column(BigInteger, nullable=False, default=0, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<StoredDocument collection={self.collection} doc_id={self.doc_id}>"
