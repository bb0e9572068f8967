from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, Float, ForeignKey, true
from sqlalchemy.orm import relationship
from portal.core.database import Base


class Project(Base):
    __tablename__ = "projects_details"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees_profile.id"), nullable=True, index=True)
    # Older rows are only linked to their profile by email
    email = Column(String, index=True)
    name_project = Column(String, nullable=False, default="N/A")
    status = Column(String, nullable=False, default="start")
    completion = Column(Float)  # fraction, 0..1
    start_date = Column(Date)
    due_date = Column(Date)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime, default=datetime.utcnow)
    update_date = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    employee = relationship("EmployeeProfile", back_populates="projects")
    milestones = relationship("Milestone", back_populates="project", order_by="Milestone.id")
    deliverables = relationship("Deliverable", back_populates="project")


class Milestone(Base):
    __tablename__ = "project_milestones"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects_details.id"), nullable=False, index=True)
    employees_id = Column(Integer, ForeignKey("employees_profile.id"), nullable=False, index=True)
    milestone_name = Column(String, nullable=False, default="Unnamed Milestone")
    description = Column(Text)
    status = Column(String, nullable=False, default="pending")
    completed_date = Column(Date)
    responsible_party = Column(String)
    delay_reason = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="milestones")
