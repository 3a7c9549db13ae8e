from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="free", server_default="free", index=True)  # free | pro | enterprise | admin

    # Profile
    name = Column(String, nullable=True)
    address = Column(String, nullable=True)
    profile_picture_url = Column(String, nullable=True)
    preferences = Column(JSON, nullable=False, default=dict)
    practice_areas = Column(JSON, nullable=False, default=list)

    last_active = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
