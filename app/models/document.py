"""Document model - un enregistrement JSON adressé par un chemin hiérarchique"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.core.database import Base, utcnow


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    path = Column(String, unique=True, nullable=False, index=True)  # ex: users/1/products/abc
    owner_id = Column(Integer, nullable=True, index=True)  # déduit de users/{uid}/...
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
