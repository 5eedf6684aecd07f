from fastapi import APIRouter
from hrms.routers import attendance, cron, leave, notifications

# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(leave.router)
api_router.include_router(attendance.router)
api_router.include_router(notifications.router)
api_router.include_router(cron.router)
