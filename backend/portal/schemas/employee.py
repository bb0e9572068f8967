from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class MilestoneDescriptor(BaseModel):
    milestone_name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    completed_date: Optional[date] = None
    responsible_party: Optional[str] = None
    delay_reason: Optional[str] = None
    # Explicit link to a project descriptor; nested milestones default to their parent
    project_ref: Optional[str] = None

    @field_validator("completed_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        return value or None

    @field_validator("project_ref", mode="before")
    @classmethod
    def ref_as_text(cls, value):
        return str(value) if isinstance(value, int) and not isinstance(value, bool) else value


class ProjectDescriptor(BaseModel):
    ref: Optional[str] = None
    name_project: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    completion: Optional[float] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    milestones: List[MilestoneDescriptor] = Field(default_factory=list)

    @field_validator("ref", mode="before")
    @classmethod
    def ref_as_text(cls, value):
        # Clients often use numeric indexes as refs
        return str(value) if isinstance(value, int) and not isinstance(value, bool) else value

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        return value or None

    @field_validator("milestones", mode="before")
    @classmethod
    def milestones_list(cls, value):
        # Anything other than a list means "no milestones"
        return value if isinstance(value, list) else []


class EmployeeProfileCreate(BaseModel):
    name: str = ""
    email: str = Field(min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    total_projects: Optional[int] = None
    total_spent: Optional[Decimal] = None
    join_date: Optional[date] = None
    projects: List[ProjectDescriptor]

    @field_validator("total_projects", "total_spent", "join_date", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def assign_project_refs(self):
        seen = set()
        for project in self.projects:
            if project.ref is None:
                continue
            if project.ref in seen:
                raise ValueError(f"duplicate project ref '{project.ref}'")
            seen.add(project.ref)

        for position, project in enumerate(self.projects):
            if project.ref is None:
                # Position is the default unless a client ref already took it
                ref = str(position)
                while ref in seen:
                    ref = f"#{ref}"
                project.ref = ref
                seen.add(project.ref)
            for milestone in project.milestones:
                if milestone.project_ref is None:
                    milestone.project_ref = project.ref
        return self


class EmployeeProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    joined_date: Optional[date] = None
    status: Optional[Literal["active", "suspended"]] = None
    image: Optional[str] = None
    total_projects: Optional[int] = None
    completed_projects: Optional[int] = None
    active_projects: Optional[int] = None
    total_spent: Optional[Decimal] = None
    video_url: Optional[str] = None


class EmployeeProfile(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    joined_date: Optional[date] = None
    status: Optional[str] = None
    image: Optional[str] = None
    video_url: Optional[str] = None
    total_projects: Optional[int] = None
    completed_projects: Optional[int] = None
    active_projects: Optional[int] = None
    total_spent: Optional[float] = None
    active: bool
    created_at: Optional[datetime] = None
    update_date: Optional[datetime] = None

    class Config:
        from_attributes = True
