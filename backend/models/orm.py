# backend/models/orm.py
"""
SQLAlchemy ORM models for persistent storage.
These models are for database persistence, separate from the planning dataclasses.
"""

from typing import Dict, Any
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    JSON,
    Index,
)
from sqlalchemy.sql import func

from database import Base


class GatewayPlan(Base):
    """
    Exported gateway plan history.
    Stores every exported configuration and assignment for later review.
    """

    __tablename__ = "gateway_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Planning session that produced the export
    session_id = Column(String(64), nullable=False)

    # Chosen hardware
    gateway_type = Column(String(16), nullable=False)
    gateway_count = Column(Integer, nullable=False)

    # Demand totals
    total_streams = Column(Integer, nullable=False)
    total_throughput = Column(Float, nullable=False)  # MP/s
    total_storage = Column(Float, nullable=False)  # TB

    complete = Column(Boolean, nullable=False, default=False)

    # Full export document
    document = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index("idx_gateway_plans_session", "session_id"),
        Index("idx_gateway_plans_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<GatewayPlan({self.id} - {self.gateway_count}x{self.gateway_type}, complete={self.complete})>"

    def to_dict(self, include_document: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        result = {
            "id": self.id,
            "session_id": self.session_id,
            "gateway_type": self.gateway_type,
            "gateway_count": self.gateway_count,
            "total_streams": self.total_streams,
            "total_throughput": self.total_throughput,
            "total_storage": self.total_storage,
            "complete": self.complete,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_document:
            result["document"] = self.document
        return result
