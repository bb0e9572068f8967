from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class DeliverableRow(BaseModel):
    id: int
    project_name: Optional[str] = None
    milestone_name: Optional[str] = None
    due_date: Optional[date] = None
    type: Optional[str] = None
    category: Optional[str] = None
    storage_type: Optional[str] = None
    status: Optional[str] = None
    storage_link: Optional[str] = None
    active: bool


class DeliverableView(BaseModel):
    id: int
    project_name: Optional[str] = None
    milestone_name: Optional[str] = None
    due_date: Optional[date] = None
    image: Optional[str] = None
    video_url: Optional[str] = None
    file_url: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    approval_date: Optional[date] = None
    approved_by: Optional[str] = None
    approved_name: Optional[str] = None
    storage: Optional[str] = None
    status: Optional[str] = None


class DeliverableUpdate(BaseModel):
    # The edit form sends "Type" and "Storage" capitalised
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(min_length=1)
    type: str = Field(min_length=1, alias="Type")
    storage: str = Field(min_length=1, alias="Storage")
    approval_date: Optional[date] = None
    approved_name: Optional[str] = None
    file_url: Optional[str] = None
    category: Optional[str] = None


class Deliverable(BaseModel):
    id: int
    project_id: int
    milestone_id: Optional[int] = None
    type: Optional[str] = None
    category: Optional[str] = None
    storage: Optional[str] = None
    file_url: Optional[str] = None
    status: Optional[str] = None
    approval_date: Optional[date] = None
    approved_by: Optional[str] = None
    approved_name: Optional[str] = None
    active: bool

    class Config:
        from_attributes = True
