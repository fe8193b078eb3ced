# models/user.py
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from leadintake.db.base_class import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(200), nullable=True)
    email = Column(String(255), unique=True, nullable=False)

    # Relationships
    buyers = relationship("Buyer", back_populates="owner")
    history_entries = relationship("BuyerHistory", back_populates="user")
