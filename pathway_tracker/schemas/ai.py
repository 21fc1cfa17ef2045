"""
AI Proxy Schemas
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field

from pathway_tracker.schemas.base import BaseSchema


class GenerateMessageRequest(BaseSchema):
    first_name: str = Field(..., min_length=1, max_length=100)
    pathway: str = Field(..., min_length=1)
    current_stage_id: str = Field(..., min_length=1)
    joined_date: date
    tags: List[str] = Field(default_factory=list)


class GenerateMessageResponse(BaseSchema):
    message: str


class AnalyzeJourneyRequest(BaseSchema):
    first_name: str = Field(..., min_length=1, max_length=100)
    pathway: str = Field(..., min_length=1)
    current_stage: str = Field(..., min_length=1)
    joined_date: date
    last_interaction: Optional[str] = None
    days_since_interaction: int = Field(..., ge=0)
    notes: List[str] = Field(default_factory=list)


class JourneyStatus(str, Enum):
    ON_TRACK = "On Track"
    NEEDS_ATTENTION = "Needs Attention"
    STALLED = "Stalled"


class JourneyAnalysis(BaseSchema):
    status: JourneyStatus
    reasoning: str
    suggested_action: str
