"""
AI Endpoints
Gemini-backed drafting and journey analysis
"""

from typing import Any

from fastapi import APIRouter, Depends

from pathway_tracker.core.deps import require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.schemas.ai import (
    AnalyzeJourneyRequest,
    GenerateMessageRequest,
    GenerateMessageResponse,
    JourneyAnalysis,
)
from pathway_tracker.services.ai_service import ai_service

router = APIRouter()


@router.post("/generate-message", response_model=GenerateMessageResponse)
async def generate_message(
    data: GenerateMessageRequest,
    principal: Principal = Depends(require_permission(Permission.AI_GENERATE_MESSAGE)),
) -> Any:
    message = await ai_service.generate_follow_up_message(data)
    return GenerateMessageResponse(message=message)


@router.post("/analyze-journey", response_model=JourneyAnalysis)
async def analyze_journey(
    data: AnalyzeJourneyRequest,
    principal: Principal = Depends(require_permission(Permission.AI_ANALYZE_JOURNEY)),
) -> Any:
    return await ai_service.analyze_member_journey(data)
