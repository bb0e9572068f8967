from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Milestone(BaseModel):
    id: int
    project_id: int
    employees_id: int
    milestone_name: str
    description: Optional[str] = None
    status: str
    completed_date: Optional[date] = None
    responsible_party: Optional[str] = None
    delay_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MilestoneSummary(BaseModel):
    id: int
    milestone_name: str
    completed_date: Optional[date] = None
    status: str

    class Config:
        from_attributes = True


class Project(BaseModel):
    id: int
    employee_id: Optional[int] = None
    email: Optional[str] = None
    name_project: str
    status: str
    completion: Optional[float] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    active: bool
    created_at: Optional[datetime] = None
    update_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectWithMilestones(BaseModel):
    id: int
    name_project: str
    status: str
    completion: Optional[float] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    milestones: List[MilestoneSummary] = []


class ProjectFields(BaseModel):
    """Project block of the edit form; ``progress`` is a percentage."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    start_date: Optional[date] = Field(default=None, alias="startDate")
    progress: float = Field(default=0, ge=0, le=100)
    status: str
    due_date: Optional[date] = Field(default=None, alias="dueDate")


class MilestoneFields(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    status: Optional[str] = None
    completed_date: Optional[date] = None


class ProjectUpdate(BaseModel):
    project: ProjectFields
    milestones: List[MilestoneFields] = []
