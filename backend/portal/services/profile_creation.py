"""
Creation of an employee profile together with its projects and milestones.

The profile, projects and milestones are written in one transaction. Uploaded
media is stored first; if any insert fails the transaction is rolled back and
the stored files are deleted again, so a failed request leaves nothing behind.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError

from portal.core.database import Store
from portal.models import EmployeeProfile, Project, Milestone
from portal.schemas.employee import EmployeeProfileCreate

logger = logging.getLogger(__name__)


class ProfileCreationError(Exception):
    """The cascade failed and was rolled back."""


@dataclass
class CreatedProfile:
    employee: EmployeeProfile
    projects: List[Project]
    milestones: List[Milestone] = field(default_factory=list)


class ProfileCreationService:
    def __init__(self, store: Store, storage):
        self.store = store
        self.storage = storage

    async def _store_uploads(self, uploads: Dict[str, Optional[UploadFile]]) -> Dict[str, str]:
        stored = {}
        try:
            for field_name, upload in uploads.items():
                if upload is None or not upload.filename:
                    continue
                # Stream the spooled file instead of reading it into memory
                await upload.seek(0)
                stored[field_name] = await self.storage.upload_file(
                    file_content=upload.file,
                    field_name=field_name,
                    filename=upload.filename,
                    content_type=upload.content_type or "application/octet-stream",
                )
        except Exception:
            await self._discard_uploads(stored.values())
            raise
        return stored

    async def _discard_uploads(self, paths) -> None:
        for path in paths:
            # delete_file logs and reports failures itself
            if not await self.storage.delete_file(path):
                logger.error(f"Could not remove uploaded file after failure: {path}")

    async def create(
        self,
        data: EmployeeProfileCreate,
        image: Optional[UploadFile] = None,
        video_file: Optional[UploadFile] = None,
    ) -> CreatedProfile:
        """
        Persist the profile, its projects and their milestones atomically.

        Raises:
            ProfileCreationError: if storing the uploads or any insert fails;
                the database is left unchanged and stored files are removed
        """
        try:
            stored = await self._store_uploads({"image": image, "video_file": video_file})
        except Exception as e:
            logger.error(f"Storing uploads failed: {e}")
            raise ProfileCreationError(str(e)) from e

        try:
            async with self.store.session() as session:
                async with session.begin():
                    return await self._insert_cascade(session, data, stored)
        except SQLAlchemyError as e:
            logger.exception("Transaction error, profile creation rolled back")
            await self._discard_uploads(stored.values())
            message = str(getattr(e, "orig", None) or e)
            raise ProfileCreationError(message) from e
        except Exception as e:
            logger.exception("Unexpected error, profile creation rolled back")
            await self._discard_uploads(stored.values())
            raise ProfileCreationError(
                str(e) or "Transaction failed and rolled back. Check server logs for details."
            ) from e

    async def _insert_cascade(self, session, data: EmployeeProfileCreate, stored: Dict[str, str]) -> CreatedProfile:
        employee = EmployeeProfile(
            name=data.name,
            email=data.email,
            phone=data.phone,
            location=data.location,
            company=data.company,
            image=stored.get("image"),
            video_url=stored.get("video_file"),
            total_projects=data.total_projects,
            total_spent=data.total_spent,
            joined_date=data.join_date,
        )
        session.add(employee)
        await session.flush()

        projects = [
            Project(
                employee_id=employee.id,
                name_project=descriptor.name_project or "N/A",
                email=descriptor.email or data.email,
                completion=descriptor.completion,
                status=descriptor.status or "start",
                start_date=descriptor.start_date,
                due_date=descriptor.due_date,
            )
            for descriptor in data.projects
        ]
        session.add_all(projects)
        await session.flush()

        project_ids = {
            descriptor.ref: project.id
            for descriptor, project in zip(data.projects, projects)
        }

        milestones = []
        for descriptor in data.projects:
            for item in descriptor.milestones:
                project_id = project_ids.get(item.project_ref)
                if project_id is None:
                    logger.warning(
                        f"No inserted project for ref '{item.project_ref}', skipping milestone "
                        f"'{item.milestone_name}'"
                    )
                    continue
                milestones.append(Milestone(
                    milestone_name=item.milestone_name or "Unnamed Milestone",
                    description=item.description,
                    status=item.status or "pending",
                    completed_date=item.completed_date,
                    responsible_party=item.responsible_party,
                    delay_reason=item.delay_reason,
                    employees_id=employee.id,
                    project_id=project_id,
                ))

        if milestones:
            session.add_all(milestones)
            await session.flush()

        logger.info(
            f"Created employee profile {employee.id} with {len(projects)} project(s) "
            f"and {len(milestones)} milestone(s)"
        )
        return CreatedProfile(employee=employee, projects=projects, milestones=milestones)
