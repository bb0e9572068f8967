from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Numeric, true
from sqlalchemy.orm import relationship
from portal.core.database import Base


class EmployeeProfile(Base):
    """A client profile; rows are soft-deleted through ``active``."""

    __tablename__ = "employees_profile"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String)
    location = Column(String)
    company = Column(String)
    joined_date = Column(Date)
    status = Column(String, nullable=False, default="active")
    image = Column(String)
    video_url = Column(String)
    total_projects = Column(Integer, default=0)
    completed_projects = Column(Integer, default=0)
    active_projects = Column(Integer, default=0)
    total_spent = Column(Numeric(12, 2), default=0)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime, default=datetime.utcnow)
    update_date = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    projects = relationship("Project", back_populates="employee")
