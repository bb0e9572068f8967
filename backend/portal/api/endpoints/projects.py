import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import Store, get_session, get_store
from portal.models.project import Project, Milestone
from portal.schemas.project import (
    Project as ProjectSchema,
    Milestone as MilestoneSchema,
    MilestoneSummary,
    ProjectWithMilestones,
    ProjectUpdate,
)
from portal.services.auth import get_current_user
from portal.services.records import soft_delete

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


class ProjectNotFound(Exception):
    pass


async def _project_with_milestones(session: AsyncSession, project: Project) -> ProjectWithMilestones:
    result = await session.execute(
        select(Milestone)
        .where(Milestone.project_id == project.id)
        .order_by(Milestone.completed_date, Milestone.id)
    )
    return ProjectWithMilestones(
        id=project.id,
        name_project=project.name_project,
        status=project.status,
        completion=project.completion,
        start_date=project.start_date,
        due_date=project.due_date,
        milestones=[MilestoneSummary.model_validate(m) for m in result.scalars().all()],
    )


@router.get("/project-Data", response_model=List[ProjectSchema])
async def list_projects(session: AsyncSession = Depends(get_session)):
    """Active projects, one per (email, project name); the lowest id wins."""
    first_ids = (
        select(func.min(Project.id))
        .where(Project.active.is_(True))
        .group_by(Project.email, Project.name_project)
    )
    try:
        result = await session.execute(
            select(Project)
            .where(Project.id.in_(first_ids))
            .order_by(Project.email, Project.name_project, Project.id)
        )
        return result.scalars().all()
    except Exception as e:
        logger.error(f"Error fetching project data: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})


@router.get("/projects/details/{project_id}", response_model=ProjectWithMilestones)
async def get_project_details(project_id: int, session: AsyncSession = Depends(get_session)):
    """An active project with its milestones."""
    result = await session.execute(
        select(Project).where(Project.id == project_id, Project.active.is_(True))
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project ID: {project_id} not found.")
    return await _project_with_milestones(session, project)


@router.get("/Edit-Project-data/{project_id}", response_model=ProjectWithMilestones)
async def get_project_for_edit(project_id: int, session: AsyncSession = Depends(get_session)):
    project = await session.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return await _project_with_milestones(session, project)


@router.put("/project/{project_id}")
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    store: Store = Depends(get_store),
):
    """Update a project and its existing milestones in one transaction."""
    fields = payload.project
    try:
        async with store.session() as session:
            async with session.begin():
                project = await session.get(Project, project_id)
                if project is None:
                    raise ProjectNotFound(f"Project {project_id} not found for update.")

                project.name_project = fields.name
                project.start_date = fields.start_date
                project.completion = fields.progress / 100
                project.status = fields.status
                project.due_date = fields.due_date
                project.update_date = datetime.utcnow()

                updated_milestones = []
                for item in payload.milestones:
                    # New milestones are not created from the edit form
                    if item.id is None:
                        logger.warning(f"Skipping milestone without ID: {item.name}")
                        continue
                    result = await session.execute(
                        select(Milestone).where(Milestone.id == item.id, Milestone.project_id == project_id)
                    )
                    milestone = result.scalar_one_or_none()
                    if milestone is None:
                        logger.warning(f"Milestone {item.id} does not belong to project {project_id}")
                        continue
                    if item.name is not None:
                        milestone.milestone_name = item.name
                    if item.status is not None:
                        milestone.status = item.status
                    milestone.completed_date = item.completed_date
                    milestone.updated_at = datetime.utcnow()
                    updated_milestones.append(milestone)

                await session.flush()
                response = {
                    "message": "Project and Milestones updated successfully.",
                    "project": ProjectSchema.model_validate(project),
                    "milestones": [MilestoneSchema.model_validate(m) for m in updated_milestones],
                }
    except ProjectNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Database transaction error updating project {project_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Failed to update project and milestones. Changes were rolled back.",
                "details": str(e),
            },
        )

    return response


@router.delete("/project-delete/{project_id}")
async def delete_project(project_id: int, session: AsyncSession = Depends(get_session)):
    try:
        project = await soft_delete(session, Project, project_id, stamp_column="update_date")
    except Exception as e:
        logger.error(f"Error deleting project {project_id}: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})

    if project is None:
        raise HTTPException(status_code=404, detail="Project not found or already inactive.")

    return {
        "message": "Project deleted (soft delete) successfully.",
        "project": ProjectSchema.model_validate(project),
    }
