"""
Tests for member endpoints and their ownership scoping
"""

import uuid

import pytest

from conftest import auth_headers
from pathway_tracker.core.rbac import Role

NEW_MEMBER = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "+15550111",
    "pathway": "NEW_BELIEVER",
    "current_stage_id": "nb-1",
    "tags": ["youth", " youth ", "music"],
}


@pytest.mark.asyncio
async def test_create_member_is_assigned_to_caller(client, make_user):
    volunteer = await make_user(Role.VOLUNTEER)

    response = await client.post("/api/v1/members/", json=NEW_MEMBER, headers=auth_headers(volunteer))

    assert response.status_code == 201
    body = response.json()
    assert body["assigned_to_id"] == str(volunteer.id)
    assert body["status"] == "ACTIVE"
    assert body["tags"] == ["youth", "music"]
    assert body["notes"] == []


@pytest.mark.asyncio
async def test_create_member_rejects_unknown_pathway(client, make_user):
    volunteer = await make_user(Role.VOLUNTEER)

    response = await client.post(
        "/api/v1/members/", json={**NEW_MEMBER, "pathway": "WANDERER"}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_volunteer_lists_only_own_members(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    other = await make_user(Role.VOLUNTEER)
    mine = await make_member(volunteer)
    await make_member(other)

    response = await client.get("/api/v1/members/", headers=auth_headers(volunteer))

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert [m["id"] for m in response.json()["items"]] == [str(mine.id)]


@pytest.mark.asyncio
async def test_team_leader_lists_all_members(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    await make_member(await make_user(Role.VOLUNTEER))
    await make_member(await make_user(Role.VOLUNTEER))

    response = await client.get("/api/v1/members/", headers=auth_headers(leader))

    assert response.json()["total"] == 2


@pytest.mark.asyncio
async def test_list_members_filters(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    await make_member(leader, first_name="Alice", pathway="NEWCOMER")
    await make_member(leader, first_name="Bob", pathway="NEW_BELIEVER")

    by_pathway = await client.get("/api/v1/members/?pathway=NEW_BELIEVER", headers=auth_headers(leader))
    by_search = await client.get("/api/v1/members/?search=ali", headers=auth_headers(leader))

    assert [m["first_name"] for m in by_pathway.json()["items"]] == ["Bob"]
    assert [m["first_name"] for m in by_search.json()["items"]] == ["Alice"]


@pytest.mark.asyncio
async def test_volunteer_cannot_read_foreign_member(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(await make_user(Role.VOLUNTEER))

    response = await client.get(f"/api/v1/members/{member.id}", headers=auth_headers(volunteer))

    assert response.status_code == 403
    assert response.json()["detail"]["user_role"] == "VOLUNTEER"


@pytest.mark.asyncio
async def test_team_leader_updates_foreign_member(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    member = await make_member(await make_user(Role.VOLUNTEER))

    response = await client.put(
        f"/api/v1/members/{member.id}",
        json={"status": "INTEGRATED", "current_stage_id": "stage-4"},
        headers=auth_headers(leader),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "INTEGRATED"
    assert response.json()["current_stage_id"] == "stage-4"


@pytest.mark.asyncio
async def test_null_tags_rejected_and_member_still_readable(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer, tags=["newcomer"])
    headers = auth_headers(volunteer)

    response = await client.put(f"/api/v1/members/{member.id}", json={"tags": None}, headers=headers)
    assert response.status_code == 422

    detail = await client.get(f"/api/v1/members/{member.id}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["tags"] == ["newcomer"]

    listing = await client.get("/api/v1/members/", headers=headers)
    assert listing.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["first_name", "email", "phone", "pathway", "status"])
async def test_null_required_member_field_is_422(client, make_user, make_member, field):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.put(
        f"/api/v1/members/{member.id}", json={field: None}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_null_optional_member_field_clears_it(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer, city="Springfield")

    response = await client.put(
        f"/api/v1/members/{member.id}", json={"city": None}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 200
    assert response.json()["city"] is None


@pytest.mark.asyncio
async def test_get_missing_member(client, make_user):
    admin = await make_user(Role.ADMIN)

    response = await client.get(f"/api/v1/members/{uuid.uuid4()}", headers=auth_headers(admin))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_volunteer_cannot_delete_even_own_member(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.delete(f"/api/v1/members/{member.id}", headers=auth_headers(volunteer))

    assert response.status_code == 403
    assert response.json()["detail"]["required"] == "member:delete"


@pytest.mark.asyncio
async def test_admin_deletes_member(client, make_user, make_member):
    admin = await make_user(Role.ADMIN)
    member = await make_member(await make_user(Role.VOLUNTEER))

    response = await client.delete(f"/api/v1/members/{member.id}", headers=auth_headers(admin))
    assert response.status_code == 204

    lookup = await client.get(f"/api/v1/members/{member.id}", headers=auth_headers(admin))
    assert lookup.status_code == 404


@pytest.mark.asyncio
async def test_assign_member(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(leader)

    response = await client.put(
        f"/api/v1/members/{member.id}/assign",
        json={"assigned_to_id": str(volunteer.id)},
        headers=auth_headers(leader),
    )

    assert response.status_code == 200
    assert response.json()["assigned_to_id"] == str(volunteer.id)

    visible = await client.get(f"/api/v1/members/{member.id}", headers=auth_headers(volunteer))
    assert visible.status_code == 200


@pytest.mark.asyncio
async def test_assign_member_to_unknown_user(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    member = await make_member(leader)

    response = await client.put(
        f"/api/v1/members/{member.id}/assign",
        json={"assigned_to_id": str(uuid.uuid4())},
        headers=auth_headers(leader),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_volunteer_cannot_reassign(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.put(
        f"/api/v1/members/{member.id}/assign",
        json={"assigned_to_id": str(volunteer.id)},
        headers=auth_headers(volunteer),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_add_note_to_own_member(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.post(
        f"/api/v1/members/{member.id}/notes",
        json={"content": "Met after service, interested in small groups"},
        headers=auth_headers(volunteer),
    )

    assert response.status_code == 201
    assert response.json()["member_id"] == str(member.id)

    detail = await client.get(f"/api/v1/members/{member.id}", headers=auth_headers(volunteer))
    assert [n["content"] for n in detail.json()["notes"]] == ["Met after service, interested in small groups"]


@pytest.mark.asyncio
async def test_add_note_to_foreign_member_forbidden(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(await make_user(Role.VOLUNTEER))

    response = await client.post(
        f"/api/v1/members/{member.id}/notes", json={"content": "hi"}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 403
