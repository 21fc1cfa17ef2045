"""
API v1 Router
"""

from fastapi import APIRouter

from pathway_tracker.api.v1.endpoints import ai, auth, communications, health, members, tasks, users

api_router = APIRouter()

for module, prefix, tag in (
    (auth, "/auth", "authentication"),
    (users, "/users", "users"),
    (members, "/members", "members"),
    (tasks, "/tasks", "tasks"),
    (communications, "/communications", "communications"),
    (ai, "/ai", "ai"),
    (health, "/health", "health"),
):
    api_router.include_router(module.router, prefix=prefix, tags=[tag])
