"""
Tests for task endpoints
"""

import uuid

import pytest

from conftest import auth_headers
from pathway_tracker.core.rbac import Role


@pytest.mark.asyncio
async def test_create_task_defaults_to_caller(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.post(
        "/api/v1/tasks/",
        json={"description": "Invite to lunch", "due_date": "2030-05-01", "member_id": str(member.id)},
        headers=auth_headers(volunteer),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["assigned_to_id"] == str(volunteer.id)
    assert body["priority"] == "MEDIUM"
    assert body["completed"] is False


@pytest.mark.asyncio
async def test_volunteer_cannot_assign_task_to_someone_else(client, make_user, make_member):
    volunteer = await make_user(Role.VOLUNTEER)
    other = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.post(
        "/api/v1/tasks/",
        json={
            "description": "Follow up",
            "due_date": "2030-05-01",
            "member_id": str(member.id),
            "assigned_to_id": str(other.id),
        },
        headers=auth_headers(volunteer),
    )

    assert response.status_code == 403
    assert response.json()["detail"]["required"] == "task:assign"


@pytest.mark.asyncio
async def test_team_leader_assigns_task(client, make_user, make_member):
    leader = await make_user(Role.TEAM_LEADER)
    volunteer = await make_user(Role.VOLUNTEER)
    member = await make_member(volunteer)

    response = await client.post(
        "/api/v1/tasks/",
        json={
            "description": "Follow up",
            "due_date": "2030-05-01",
            "priority": "HIGH",
            "member_id": str(member.id),
            "assigned_to_id": str(volunteer.id),
        },
        headers=auth_headers(leader),
    )

    assert response.status_code == 201
    assert response.json()["assigned_to_id"] == str(volunteer.id)


@pytest.mark.asyncio
async def test_create_task_for_missing_member(client, make_user):
    volunteer = await make_user(Role.VOLUNTEER)

    response = await client.post(
        "/api/v1/tasks/",
        json={"description": "x", "due_date": "2030-05-01", "member_id": str(uuid.uuid4())},
        headers=auth_headers(volunteer),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_tasks_scoped_to_assignee(client, make_user, make_member, make_task):
    volunteer = await make_user(Role.VOLUNTEER)
    other = await make_user(Role.VOLUNTEER)
    leader = await make_user(Role.TEAM_LEADER)
    member = await make_member(volunteer)
    await make_task(member, volunteer)
    await make_task(member, other)

    own = await client.get("/api/v1/tasks/", headers=auth_headers(volunteer))
    everything = await client.get("/api/v1/tasks/", headers=auth_headers(leader))

    assert own.json()["total"] == 1
    assert everything.json()["total"] == 2


@pytest.mark.asyncio
async def test_list_tasks_filters_completed(client, make_user, make_member, make_task):
    leader = await make_user(Role.TEAM_LEADER)
    member = await make_member(leader)
    await make_task(member, leader, completed=True)
    await make_task(member, leader)

    response = await client.get("/api/v1/tasks/?completed=false", headers=auth_headers(leader))

    assert response.json()["total"] == 1
    assert response.json()["items"][0]["completed"] is False


@pytest.mark.asyncio
async def test_update_task_sets_completion_timestamp(client, make_user, make_member, make_task):
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)

    response = await client.put(
        f"/api/v1/tasks/{task.id}", json={"completed": True}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 200
    assert response.json()["completed"] is True
    assert response.json()["completed_at"] is not None


@pytest.mark.asyncio
async def test_team_leader_updates_foreign_task(client, make_user, make_member, make_task):
    leader = await make_user(Role.TEAM_LEADER)
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)

    response = await client.put(
        f"/api/v1/tasks/{task.id}", json={"priority": "LOW"}, headers=auth_headers(leader)
    )

    assert response.status_code == 200
    assert response.json()["priority"] == "LOW"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["description", "due_date", "priority"])
async def test_null_required_task_field_is_422(client, make_user, make_member, make_task, field):
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)

    response = await client.put(
        f"/api/v1/tasks/{task.id}", json={field: None}, headers=auth_headers(volunteer)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_null_completed_keeps_completion_timestamp(client, make_user, make_member, make_task):
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)
    headers = auth_headers(volunteer)

    done = await client.put(f"/api/v1/tasks/{task.id}", json={"completed": True}, headers=headers)
    completed_at = done.json()["completed_at"]
    assert completed_at is not None

    response = await client.put(f"/api/v1/tasks/{task.id}", json={"completed": None}, headers=headers)
    assert response.status_code == 422

    current = await client.get(f"/api/v1/tasks/{task.id}", headers=headers)
    assert current.json()["completed"] is True
    assert current.json()["completed_at"] == completed_at


class TestCompleteTask:
    """Completion uses the strict ownership gate rather than view_all broadening"""

    @pytest.mark.asyncio
    async def test_assignee_completes(self, client, make_user, make_member, make_task):
        volunteer = await make_user(Role.VOLUNTEER)
        task = await make_task(await make_member(volunteer), volunteer)

        response = await client.patch(f"/api/v1/tasks/{task.id}/complete", headers=auth_headers(volunteer))

        assert response.status_code == 200
        assert response.json()["completed"] is True

    @pytest.mark.asyncio
    async def test_team_leader_cannot_complete_foreign_task(self, client, make_user, make_member, make_task):
        leader = await make_user(Role.TEAM_LEADER)
        volunteer = await make_user(Role.VOLUNTEER)
        task = await make_task(await make_member(volunteer), volunteer)

        response = await client.patch(f"/api/v1/tasks/{task.id}/complete", headers=auth_headers(leader))

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "You do not have permission to access this resource"

    @pytest.mark.asyncio
    async def test_super_admin_completes_any_task(self, client, make_user, make_member, make_task):
        root = await make_user(Role.SUPER_ADMIN)
        volunteer = await make_user(Role.VOLUNTEER)
        task = await make_task(await make_member(volunteer), volunteer)

        response = await client.patch(f"/api/v1/tasks/{task.id}/complete", headers=auth_headers(root))

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_task_is_404(self, client, make_user):
        volunteer = await make_user(Role.VOLUNTEER)

        response = await client.patch(f"/api/v1/tasks/{uuid.uuid4()}/complete", headers=auth_headers(volunteer))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unauthenticated_is_401(self, client):
        response = await client.patch(f"/api/v1/tasks/{uuid.uuid4()}/complete")

        assert response.status_code == 401


@pytest.mark.asyncio
async def test_volunteer_cannot_delete_tasks(client, make_user, make_member, make_task):
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)

    response = await client.delete(f"/api/v1/tasks/{task.id}", headers=auth_headers(volunteer))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_deletes_task(client, make_user, make_member, make_task):
    admin = await make_user(Role.ADMIN)
    volunteer = await make_user(Role.VOLUNTEER)
    task = await make_task(await make_member(volunteer), volunteer)

    response = await client.delete(f"/api/v1/tasks/{task.id}", headers=auth_headers(admin))
    assert response.status_code == 204

    lookup = await client.get(f"/api/v1/tasks/{task.id}", headers=auth_headers(admin))
    assert lookup.status_code == 404
