from typing import List, Optional

from hrms.core.exceptions import NotFoundError
from hrms.models.notification import Notification
from hrms.repositories.base import NotificationStore


class NotificationService:
    def __init__(self, store: NotificationStore):
        self.store = store

    def create_notification(
        self,
        employee_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Internal utility for creating notifications.
        """
        notification = Notification(
            employee_id=employee_id,
            title=title,
            message=message,
            type=type,
            link=link,
            is_read=False,
        )
        return self.store.add(notification)

    def notify_user(
        self,
        employee_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Standardized notification trigger.
        """
        return self.create_notification(employee_id, title, message, type, link)

    def list_for(self, employee_id: str, unread_only: bool = False) -> List[Notification]:
        return self.store.list_for(employee_id, unread_only=unread_only)

    def mark_read(self, employee_id: str, notification_id: int) -> Notification:
        notification = self.store.get(notification_id)
        if not notification or notification.employee_id != employee_id:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        return self.store.save(notification)

    def mark_all_read(self, employee_id: str) -> int:
        return self.store.mark_all_read(employee_id)
