from typing import List

from fastapi import APIRouter, Depends

from hrms.dependencies import get_notification_service
from hrms.routers.auth_deps import require_employee_profile
from hrms.schemas.auth import CurrentUser
from hrms.schemas.notification import NotificationResponse
from hrms.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("", response_model=List[NotificationResponse])
def get_notifications(
    unread_only: bool = False,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_for(current_user.employee_id, unread_only=unread_only)

@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_as_read(
    notification_id: int,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: NotificationService = Depends(get_notification_service),
):
    return service.mark_read(current_user.employee_id, notification_id)

@router.post("/mark-all-read")
def mark_all_notifications_as_read(
    current_user: CurrentUser = Depends(require_employee_profile),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_read(current_user.employee_id)
    return {"message": "All notifications marked as read", "updated": updated}
