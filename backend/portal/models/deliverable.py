from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, true
from sqlalchemy.orm import relationship
from portal.core.database import Base


class Deliverable(Base):
    __tablename__ = "deliverables"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects_details.id"), nullable=False, index=True)
    milestone_id = Column(Integer, ForeignKey("project_milestones.id"), nullable=True)
    type = Column(String)
    category = Column(String)
    storage = Column(String)  # storage provider, e.g. "Google Drive"
    file_url = Column(String)
    status = Column(String, default="pending")
    approval_date = Column(Date)
    approved_by = Column(String)
    approved_name = Column(String)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="deliverables")
    milestone = relationship("Milestone")
