# models/buyer.py
from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from leadintake.db.base_class import Base
from leadintake.models.enums import City, PropertyType, Bhk, Purpose, Timeline, Source, Status, sql_in

class Buyer(Base):
    __tablename__ = "buyers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    full_name = Column(String(80), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(15), nullable=False, unique=True)
    city = Column(String(20), nullable=False, default=City.CHANDIGARH.value)
    property_type = Column(String(20), nullable=False, default=PropertyType.APARTMENT.value)
    bhk = Column(String(10), nullable=True)
    purpose = Column(String(10), nullable=False, default=Purpose.BUY.value)
    budget_min = Column(Integer, nullable=True)
    budget_max = Column(Integer, nullable=True)
    timeline = Column(String(20), nullable=False, default=Timeline.EXPLORING.value)
    source = Column(String(20), nullable=False, default=Source.OTHER.value)
    status = Column(String(20), nullable=False, default=Status.NEW.value)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    __table_args__ = (
        CheckConstraint(f"city IN ({sql_in(City)})", name="chk_buyer_city"),
        CheckConstraint(f"property_type IN ({sql_in(PropertyType)})", name="chk_buyer_property_type"),
        CheckConstraint(f"bhk IS NULL OR bhk IN ({sql_in(Bhk)})", name="chk_buyer_bhk"),
        CheckConstraint(f"purpose IN ({sql_in(Purpose)})", name="chk_buyer_purpose"),
        CheckConstraint(f"timeline IN ({sql_in(Timeline)})", name="chk_buyer_timeline"),
        CheckConstraint(f"source IN ({sql_in(Source)})", name="chk_buyer_source"),
        CheckConstraint(f"status IN ({sql_in(Status)})", name="chk_buyer_status"),
        CheckConstraint("budget_min IS NULL OR budget_min >= 0", name="chk_buyer_budget_min"),
        CheckConstraint(
            "budget_min IS NULL OR budget_max IS NULL OR budget_max >= budget_min",
            name="chk_buyer_budget_range",
        ),
        Index("idx_buyer_owner", "owner_id"),
        Index("idx_buyer_updated", "updated_at"),
    )

    # Relationships
    owner = relationship("User", back_populates="buyers")
    history = relationship(
        "BuyerHistory",
        back_populates="buyer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
