"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from geoattend.api.v1.endpoints import (
    attendance,
    auth,
    health,
    tasks,
    users,
    wfh,
)

api_router = APIRouter()

# Auth (register, login, refresh, profile)
api_router.include_router(auth.router)

# Managers directory and team views
api_router.include_router(users.router)

# Geofenced entry / exit
api_router.include_router(attendance.router)

# Work-from-home requests
api_router.include_router(wfh.router)

# Tasks and assignments
api_router.include_router(tasks.router)

api_router.include_router(health.router)
