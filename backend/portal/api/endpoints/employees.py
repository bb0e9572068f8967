import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import Store, get_session, get_store
from portal.models.employee import EmployeeProfile
from portal.schemas.employee import (
    EmployeeProfile as EmployeeProfileSchema,
    EmployeeProfileCreate,
    EmployeeProfileUpdate,
)
from portal.schemas.project import Project as ProjectSchema, Milestone as MilestoneSchema
from portal.services.auth import get_current_user
from portal.services.profile_creation import ProfileCreationService, ProfileCreationError
from portal.services.records import soft_delete

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


def validation_details(exc: ValidationError) -> list:
    return jsonable_encoder(exc.errors(include_url=False, include_context=False, include_input=False))


def first_error_message(errors: list) -> str:
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{loc}: {first['msg']}" if loc else first["msg"]


def absolute_media_url(request: Request, path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    if path.startswith("/"):
        return f"{str(request.base_url).rstrip('/')}{path}"
    return path


def parse_projects(raw: Optional[str]) -> list:
    """Decode the JSON ``projects`` form field into a list of project objects."""
    try:
        projects = json.loads(raw) if raw is not None else None
    except (TypeError, ValueError) as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "projects must be valid structured data", "details": str(e)},
        )

    if projects is None or (isinstance(projects, list) and not projects):
        raise HTTPException(status_code=400, detail="project data is missing or empty")
    if not isinstance(projects, list) or not all(isinstance(p, dict) for p in projects):
        raise HTTPException(
            status_code=400,
            detail={"error": "projects must be valid structured data",
                    "details": "expected a JSON array of project objects"},
        )
    return projects


@router.get("/widgets-data", response_model=List[EmployeeProfileSchema])
async def list_active_profiles(session: AsyncSession = Depends(get_session)):
    """All active employee profiles."""
    try:
        result = await session.execute(
            select(EmployeeProfile).where(EmployeeProfile.active.is_(True)).order_by(EmployeeProfile.id)
        )
        return result.scalars().all()
    except Exception as e:
        logger.error(f"Error fetching widgets data: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})


@router.post("/employees", status_code=status.HTTP_201_CREATED)
async def create_employee(
    request: Request,
    name: str = Form(""),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    total_projects: Optional[str] = Form(None),
    total_spent: Optional[str] = Form(None),
    join_date: Optional[str] = Form(None),
    projects: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    video_file: Optional[UploadFile] = File(None),
    store: Store = Depends(get_store),
):
    """Create a profile with its projects and milestones in one transaction."""
    project_items = parse_projects(projects)

    try:
        data = EmployeeProfileCreate(
            name=name,
            email=email,
            phone=phone,
            location=location,
            company=company,
            total_projects=total_projects,
            total_spent=total_spent,
            join_date=join_date,
            projects=project_items,
        )
    except ValidationError as e:
        details = validation_details(e)
        raise HTTPException(status_code=400, detail={"error": first_error_message(details), "details": details})

    max_size = request.app.state.settings.MAX_FILE_SIZE
    for upload in (image, video_file):
        if upload is not None and upload.size and upload.size > max_size:
            logger.error(f"File {upload.filename} too large: {upload.size} bytes")
            raise HTTPException(
                status_code=400,
                detail=f"File {upload.filename} is too large. Maximum size: {max_size} bytes",
            )

    service = ProfileCreationService(store, request.app.state.storage)
    try:
        created = await service.create(data, image=image, video_file=video_file)
    except ProfileCreationError as e:
        raise HTTPException(status_code=500, detail=str(e))

    employee_data = EmployeeProfileSchema.model_validate(created.employee)
    employee_data.image = absolute_media_url(request, employee_data.image)
    employee_data.video_url = absolute_media_url(request, employee_data.video_url)

    return {
        "success": True,
        "message": "Employee profile, projects, and milestones inserted successfully.",
        "employeeData": employee_data,
        "projectData": [ProjectSchema.model_validate(p) for p in created.projects],
        "milestoneData": [MilestoneSchema.model_validate(m) for m in created.milestones],
    }


@router.delete("/employees-delete/{employee_id}")
async def delete_employee(employee_id: int, session: AsyncSession = Depends(get_session)):
    """Soft delete: the row stays, ``active`` becomes false."""
    try:
        employee = await soft_delete(session, EmployeeProfile, employee_id, stamp_column="update_date")
    except Exception as e:
        logger.error(f"Error deleting employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    return {
        "message": "Employee deleted successfully (soft delete)",
        "employee": EmployeeProfileSchema.model_validate(employee),
    }


@router.get("/edit-profile-data/{employee_id}", response_model=EmployeeProfileSchema)
async def get_profile(employee_id: int, session: AsyncSession = Depends(get_session)):
    employee = await session.get(EmployeeProfile, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return employee


@router.put("/profile-Updated/{employee_id}")
async def update_profile(
    employee_id: int,
    payload: EmployeeProfileUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Update the fields present in the body; ``status`` is active or suspended."""
    employee = await session.get(EmployeeProfile, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="User not found.")

    try:
        for field_name, value in payload.model_dump(exclude_unset=True).items():
            setattr(employee, field_name, value)
        await session.commit()
        await session.refresh(employee)
    except Exception as e:
        await session.rollback()
        logger.error(f"Error updating profile {employee_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}")

    return {
        "message": "Profile updated successfully.",
        "data": EmployeeProfileSchema.model_validate(employee),
    }
