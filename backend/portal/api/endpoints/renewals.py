import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_session
from portal.models.renewal import Renewal
from portal.schemas.renewal import Renewal as RenewalSchema, RenewalCreate, RenewalUpdate, RenewalRow
from portal.services.auth import get_current_user
from portal.services.records import soft_delete

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/renewals-data", response_model=List[RenewalRow])
async def list_renewals(session: AsyncSession = Depends(get_session)):
    """Active renewals, oldest first."""
    try:
        result = await session.execute(
            select(Renewal).where(Renewal.active.is_(True)).order_by(Renewal.id)
        )
        renewals = result.scalars().all()
    except Exception as e:
        logger.error(f"Error fetching renewals data: {e}")
        raise HTTPException(status_code=500, detail={"error": "Internal Server Error", "details": str(e)})

    logger.info(f"Renewals fetched successfully: {len(renewals)}")
    return [
        RenewalRow(
            id=r.id,
            service=r.service,
            provider=r.provider,
            domain=r.domain,
            purchase_date=r.purchase_date,
            renewal_date=r.renewal_date,
            cost=r.cost,
            auto_renew=r.autorenew,
            status=r.status,
        )
        for r in renewals
    ]


@router.post("/renewals")
async def add_renewal(payload: RenewalCreate, session: AsyncSession = Depends(get_session)):
    renewal = Renewal(
        service=payload.service,
        provider=payload.provider,
        domain=payload.domain,
        purchase_date=payload.purchase_date,
        renewal_date=payload.renewal_date,
        cost=payload.cost,
        status="Active",
        autorenew=payload.auto_renew,
        icon=payload.icon,
    )
    session.add(renewal)
    try:
        await session.commit()
        await session.refresh(renewal)
    except Exception as e:
        await session.rollback()
        logger.error(f"Database insert error for renewal: {e}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to add renewal to the database.", "details": str(e)},
        )

    logger.info(f"Renewal added successfully: {renewal.id}")
    return {"id": renewal.id, "message": "Renewal added successfully"}


@router.put("/renewals-updated/{renewal_id}")
async def update_renewal(
    renewal_id: int,
    payload: RenewalUpdate,
    session: AsyncSession = Depends(get_session),
):
    renewal = await session.get(Renewal, renewal_id)
    if renewal is None:
        raise HTTPException(status_code=404, detail=f"Renewal with ID {renewal_id} not found.")

    try:
        renewal.service = payload.service
        renewal.provider = payload.provider
        renewal.domain = payload.domain
        renewal.purchase_date = payload.purchase_date
        renewal.renewal_date = payload.renewal_date
        renewal.cost = payload.cost
        renewal.autorenew = payload.auto_renew
        renewal.daysuntilrenewal = payload.daysuntilrenewal
        renewal.icon = payload.icon
        await session.commit()
        await session.refresh(renewal)
    except Exception as e:
        await session.rollback()
        logger.error(f"Error executing renewal update: {e}")
        raise HTTPException(
            status_code=500,
            detail={"error": "An error occurred during the update.", "details": str(e)},
        )

    return {
        "message": "Renewal record updated successfully",
        "updatedRenewal": RenewalSchema.model_validate(renewal),
    }


@router.delete("/renewal-delete/{renewal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_renewal(renewal_id: int, session: AsyncSession = Depends(get_session)):
    try:
        renewal = await soft_delete(session, Renewal, renewal_id, stamp_column="updated_date")
    except Exception as e:
        logger.error(f"Error deactivating renewal {renewal_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if renewal is None:
        raise HTTPException(status_code=404, detail="Renewal not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
