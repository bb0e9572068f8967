from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from portal.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="client")
    created_at = Column(DateTime, default=datetime.utcnow)
