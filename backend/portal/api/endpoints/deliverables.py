import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_session
from portal.models.deliverable import Deliverable
from portal.models.employee import EmployeeProfile
from portal.models.project import Project, Milestone
from portal.schemas.deliverable import (
    Deliverable as DeliverableSchema,
    DeliverableRow,
    DeliverableView,
    DeliverableUpdate,
)
from portal.services.auth import get_current_user
from portal.services.records import soft_delete

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/deliverable-data", response_model=List[DeliverableRow])
async def list_deliverables(session: AsyncSession = Depends(get_session)):
    """Active deliverables with their project and milestone names."""
    stmt = (
        select(
            Deliverable.id,
            Project.name_project.label("project_name"),
            Milestone.milestone_name,
            Project.due_date,
            Deliverable.type,
            Deliverable.category,
            Deliverable.storage.label("storage_type"),
            Deliverable.status,
            Deliverable.file_url.label("storage_link"),
            Deliverable.active,
        )
        .outerjoin(Project, Deliverable.project_id == Project.id)
        .outerjoin(Milestone, Deliverable.milestone_id == Milestone.id)
        .where(Deliverable.active.is_(True))
        .order_by(Project.name_project, Deliverable.id)
    )
    try:
        result = await session.execute(stmt)
        return [DeliverableRow(**row) for row in result.mappings().all()]
    except Exception as e:
        logger.error(f"Error fetching deliverable data: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})


@router.get("/deliverable-view", response_model=DeliverableView)
async def view_deliverable(
    deliverable_id: Optional[int] = Query(None, alias="id"),
    session: AsyncSession = Depends(get_session),
):
    """One deliverable with its project, milestone and the owning profile's media."""
    if deliverable_id is None:
        raise HTTPException(
            status_code=400,
            detail="Deliverable ID is required in the query parameters (e.g., /api/deliverable-view?id=123)",
        )

    stmt = (
        select(
            Deliverable.id,
            Project.name_project.label("project_name"),
            Milestone.milestone_name,
            Project.due_date,
            EmployeeProfile.image,
            EmployeeProfile.video_url,
            Deliverable.file_url,
            Deliverable.type,
            Deliverable.category,
            Deliverable.approval_date,
            Deliverable.approved_by,
            Deliverable.approved_name,
            Deliverable.storage,
            Deliverable.status,
        )
        .outerjoin(Project, Deliverable.project_id == Project.id)
        .outerjoin(EmployeeProfile, Project.employee_id == EmployeeProfile.id)
        .outerjoin(Milestone, Deliverable.milestone_id == Milestone.id)
        .where(Deliverable.id == deliverable_id)
    )
    try:
        row = (await session.execute(stmt)).mappings().first()
    except Exception as e:
        logger.error(f"Error fetching deliverable {deliverable_id}: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})

    if row is None:
        raise HTTPException(status_code=404, detail="Deliverable not found")
    return DeliverableView(**row)


@router.put("/deliverable-updated/{deliverable_id}", response_model=DeliverableSchema)
async def update_deliverable(
    deliverable_id: int,
    payload: DeliverableUpdate,
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(Deliverable).where(Deliverable.id == deliverable_id, Deliverable.active.is_(True))
    )
    deliverable = result.scalar_one_or_none()
    if deliverable is None:
        raise HTTPException(status_code=404, detail="Deliverable not found or is inactive")

    try:
        for field_name, value in payload.model_dump().items():
            setattr(deliverable, field_name, value)
        deliverable.updated_at = datetime.utcnow()
        await session.commit()
        await session.refresh(deliverable)
    except Exception as e:
        await session.rollback()
        logger.error(f"Error updating deliverable {deliverable_id}: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})

    return deliverable


@router.delete("/deliverable-delete/{deliverable_id}")
async def delete_deliverable(deliverable_id: int, session: AsyncSession = Depends(get_session)):
    try:
        deliverable = await soft_delete(session, Deliverable, deliverable_id, stamp_column="updated_at")
    except Exception as e:
        logger.error(f"Error deleting deliverable {deliverable_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if deliverable is None:
        raise HTTPException(status_code=404, detail="Deliverable not found.")

    return {
        "message": "Deliverable deleted successfully.",
        "deliverable": DeliverableSchema.model_validate(deliverable),
    }
