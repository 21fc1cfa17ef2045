"""
AI Service
Server-side proxy to the Gemini ``generateContent`` REST endpoint.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, Optional

import httpx
import structlog
from fastapi import HTTPException, status
from pydantic import ValidationError

from pathway_tracker.core.config import settings
from pathway_tracker.schemas.ai import (
    AnalyzeJourneyRequest,
    GenerateMessageRequest,
    JourneyAnalysis,
    JourneyStatus,
)

logger = structlog.get_logger()

# Sentinel used by clients when a member has no recorded messages
NO_INTERACTION_DAYS = 999

_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "status": {"type": "STRING", "enum": [s.value for s in JourneyStatus]},
        "reasoning": {"type": "STRING"},
        "suggested_action": {"type": "STRING"},
    },
    "required": ["status", "reasoning", "suggested_action"],
}


class AIService:
    def __init__(self) -> None:
        self.api_key = settings.GEMINI_API_KEY
        self.model = settings.GEMINI_MODEL
        self.api_base_url = settings.GEMINI_API_BASE_URL.rstrip("/")
        self.timeout = settings.GEMINI_TIMEOUT_SECONDS

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _generate(self, prompt: str, generation_config: Optional[Dict[str, Any]] = None) -> str:
        """
        Call ``generateContent`` and return the first candidate's text

        Raises:
            HTTPException: 503 when no API key is configured, 502 on provider failure
        """
        if not self.is_configured():
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="AI features are not configured"
            )

        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"{self.api_base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                data = response.json()
            return "".join(
                part.get("text", "")
                for part in data["candidates"][0]["content"]["parts"]
            ).strip()
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
            logger.error("AI provider request failed", model=self.model, error=str(exc))
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="AI provider request failed"
            )

    async def generate_follow_up_message(self, data: GenerateMessageRequest) -> str:
        days_since_joined = (date.today() - data.joined_date).days
        prompt = (
            "You are a helpful assistant for a church volunteer application called 'Pathway Tracker'.\n"
            "Draft a short, warm and friendly SMS message (under 160 characters ideally, "
            f"never more than 200) to a church member named {data.first_name}.\n\n"
            "Context:\n"
            f"- Pathway: {data.pathway}\n"
            f"- Current Stage ID: {data.current_stage_id}\n"
            f"- Days since joining: {days_since_joined}\n"
            f"- Tags: {', '.join(data.tags)}\n\n"
            "The tone should be personal and encouraging, not formal. "
            "Do not use placeholders like [Your Name]; end with ' - The Team'."
        )
        message = await self._generate(prompt)
        logger.info("Follow-up message generated", pathway=data.pathway, length=len(message))
        return message or "Could not generate message."

    async def analyze_member_journey(self, data: AnalyzeJourneyRequest) -> JourneyAnalysis:
        if data.days_since_interaction == NO_INTERACTION_DAYS:
            interaction = "No recorded messages"
        else:
            interaction = f"{data.days_since_interaction} days ago"

        prompt = (
            "Analyze this church member's integration progress:\n"
            f"Name: {data.first_name}\n"
            f"Joined: {data.joined_date.isoformat()} (Current Date: {date.today().isoformat()})\n"
            f"Pathway: {data.pathway}\n"
            f"Current Stage: {data.current_stage}\n"
            f"Last Recorded Interaction: {data.last_interaction or 'None'} ({interaction})\n"
            f"Recent Notes context: {json.dumps(data.notes[:3])}\n\n"
            "Task:\n"
            "1. Determine status:\n"
            "   - 'On Track': joined recently or has interaction/stage movement within the last 14 days.\n"
            "   - 'Needs Attention': no interaction for 14-30 days or notes indicate questions/hesitation.\n"
            "   - 'Stalled': no interaction for 30+ days or stuck in stage 1 for more than 3 weeks.\n"
            "2. Provide reasoning (max 15 words).\n"
            "3. Suggest one concrete next step (max 6 words)."
        )
        text = await self._generate(
            prompt,
            {"responseMimeType": "application/json", "responseSchema": _ANALYSIS_SCHEMA},
        )
        try:
            analysis = JourneyAnalysis.model_validate(json.loads(text))
        except (ValueError, ValidationError) as exc:
            logger.error("AI analysis response could not be parsed", error=str(exc))
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="AI provider returned an invalid analysis"
            )

        logger.info("Member journey analyzed", status=analysis.status)
        return analysis


ai_service = AIService()
