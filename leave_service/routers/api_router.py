from fastapi import APIRouter
from leave_service.routers import admin, auth, leave

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Accounts"])
api_router.include_router(admin.router, tags=["Administration"])
api_router.include_router(leave.router, tags=["Leave"])
