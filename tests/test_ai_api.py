"""
Tests for the AI proxy endpoints
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from conftest import auth_headers
from pathway_tracker.core.rbac import Role
from pathway_tracker.services.ai_service import ai_service

GENERATE_PAYLOAD = {
    "first_name": "Ada",
    "pathway": "NEWCOMER",
    "current_stage_id": "nc-2",
    "joined_date": "2024-01-07",
    "tags": ["family"],
}

ANALYZE_PAYLOAD = {
    "first_name": "Ada",
    "pathway": "NEWCOMER",
    "current_stage": "Welcome Lunch",
    "joined_date": "2024-01-07",
    "days_since_interaction": 21,
    "notes": ["Asked about kids ministry"],
}


@pytest.mark.asyncio
async def test_generate_message_without_api_key_is_503(client, make_user):
    volunteer = await make_user(Role.VOLUNTEER)

    response = await client.post("/api/v1/ai/generate-message", json=GENERATE_PAYLOAD, headers=auth_headers(volunteer))

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_generate_message(client, make_user):
    volunteer = await make_user(Role.VOLUNTEER)

    with patch.object(ai_service, "_generate", new=AsyncMock(return_value="Hi Ada! - The Team")) as generate:
        response = await client.post(
            "/api/v1/ai/generate-message", json=GENERATE_PAYLOAD, headers=auth_headers(volunteer)
        )

    assert response.status_code == 200
    assert response.json() == {"message": "Hi Ada! - The Team"}
    prompt = generate.await_args.args[0]
    assert "Ada" in prompt
    assert "nc-2" in prompt


@pytest.mark.asyncio
async def test_analyze_journey_parses_json(client, make_user):
    leader = await make_user(Role.TEAM_LEADER)
    reply = json.dumps({
        "status": "Needs Attention",
        "reasoning": "Three weeks without contact",
        "suggested_action": "Call this week",
    })

    with patch.object(ai_service, "_generate", new=AsyncMock(return_value=reply)):
        response = await client.post(
            "/api/v1/ai/analyze-journey", json=ANALYZE_PAYLOAD, headers=auth_headers(leader)
        )

    assert response.status_code == 200
    assert response.json() == {
        "status": "Needs Attention",
        "reasoning": "Three weeks without contact",
        "suggested_action": "Call this week",
    }


@pytest.mark.asyncio
async def test_analyze_journey_invalid_reply_is_502(client, make_user):
    leader = await make_user(Role.TEAM_LEADER)

    with patch.object(ai_service, "_generate", new=AsyncMock(return_value='{"status": "Lost"}')):
        response = await client.post(
            "/api/v1/ai/analyze-journey", json=ANALYZE_PAYLOAD, headers=auth_headers(leader)
        )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_ai_requires_authentication(client):
    response = await client.post("/api/v1/ai/generate-message", json=GENERATE_PAYLOAD)

    assert response.status_code == 401
