# models/buyer_history.py
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime
from leadintake.db.base_class import Base
from leadintake.models.enums import HistoryAction, sql_in

class BuyerHistory(Base):
    __tablename__ = "buyer_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    buyer_id = Column(Uuid(as_uuid=True), ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False)
    changed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    action = Column(String(10), nullable=False)
    diff = Column(JSON, nullable=False)

    __table_args__ = (
        CheckConstraint(f"action IN ({sql_in(HistoryAction)})", name="chk_history_action"),
        Index("idx_buyer_history_buyer", "buyer_id"),
        Index("idx_buyer_history_time", "changed_at"),
    )

    # Relationships
    buyer = relationship("Buyer", back_populates="history")
    user = relationship("User", back_populates="history_entries")
