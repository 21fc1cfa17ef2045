"""
Communication Endpoints
Email and SMS follow-ups plus the per-member message log
"""

from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.database import get_db
from pathway_tracker.core.deps import require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.schemas.communication import (
    MessageResponse,
    SendEmailRequest,
    SendResult,
    SendSMSRequest,
)
from pathway_tracker.services.communication import communication_service

router = APIRouter()


@router.post("/email", response_model=SendResult)
async def send_email(
    data: SendEmailRequest,
    principal: Principal = Depends(require_permission(Permission.COMM_SEND_EMAIL)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await communication_service.send_email(db, principal, data)


@router.post("/sms", response_model=SendResult)
async def send_sms(
    data: SendSMSRequest,
    principal: Principal = Depends(require_permission(Permission.COMM_SEND_SMS)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await communication_service.send_sms(db, principal, data)


@router.get("/history/{member_id}", response_model=List[MessageResponse])
async def message_history(
    member_id: UUID,
    principal: Principal = Depends(require_permission(Permission.COMM_VIEW_HISTORY)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await communication_service.get_history(db, principal, member_id)
