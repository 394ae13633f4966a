"""Notification Service - In-app notifications with email and push fan-out

In-app records are the source of truth. Email and push deliveries are queued
in the outbox for an external sender; a failure to queue them is logged and
never fails the notification itself.
"""
from typing import Any, Dict, List, Optional, Tuple

from ..config.settings import settings
from ..domain.enums import NotificationCategory, NotificationType, OutboxChannel
from ..domain.errors import NotificationNotFoundError, StoreUnavailableError, ValidationError
from ..domain.models import Notification, OutboxEntry, PushSubscription
from ..repositories.notification_repo import NotificationRepository
from ..utils.idgen import generate_notification_id, generate_outbox_id, generate_subscription_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Service for creating and managing notifications"""

    def __init__(self, repo: Optional[NotificationRepository] = None):
        self.repo = repo or NotificationRepository()

    # =========================================================================
    # Creation & fan-out
    # =========================================================================

    def create_notification(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        category: NotificationCategory = NotificationCategory.OTHER,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[str] = None,
        send_email: bool = False,
        email_recipient: Optional[str] = None,
        send_push: bool = True
    ) -> Notification:
        """
        Create an in-app notification and queue its companion deliveries

        Args:
            send_email: queue an email copy to email_recipient
            send_push: queue a push message for each of the user's subscriptions
        """
        if not user_id or not title or not message:
            raise ValidationError("user_id, title and message are required")

        notification = Notification(
            notification_id=generate_notification_id(),
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            category=category,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            is_read=False,
            created_at=utc_now()
        )
        self.repo.create_notification(notification)

        if send_email and email_recipient:
            self._queue_email(notification, email_recipient)
        if send_push:
            self._queue_push(notification)

        return notification

    def _action_url(self, notification: Notification) -> Optional[str]:
        if notification.related_entity_type == "request" and notification.related_entity_id:
            return f"{settings.frontend_url}/requests/{notification.related_entity_id}"
        return None

    def _queue_email(self, notification: Notification, recipient: str) -> None:
        action_url = self._action_url(notification)
        body = notification.message
        if action_url:
            body = f"{body}\n\nView details: {action_url}"

        try:
            self.repo.enqueue(OutboxEntry(
                outbox_id=generate_outbox_id(),
                notification_id=notification.notification_id,
                channel=OutboxChannel.EMAIL,
                recipient=recipient,
                subject=notification.title,
                body=body,
                created_at=utc_now()
            ))
        except StoreUnavailableError as e:
            logger.warning(
                f"Failed to queue notification email: {e}",
                extra={"notification_id": notification.notification_id}
            )

    def _queue_push(self, notification: Notification) -> None:
        try:
            subscriptions = self.repo.get_subscriptions(notification.user_id)
            for subscription in subscriptions:
                self.repo.enqueue(OutboxEntry(
                    outbox_id=generate_outbox_id(),
                    notification_id=notification.notification_id,
                    channel=OutboxChannel.PUSH,
                    recipient=subscription.endpoint,
                    subject=notification.title,
                    body=notification.message,
                    payload={
                        "keys": subscription.keys,
                        "url": self._action_url(notification),
                        "category": notification.category.value,
                    },
                    created_at=utc_now()
                ))
        except StoreUnavailableError as e:
            logger.warning(
                f"Failed to queue push notification: {e}",
                extra={"notification_id": notification.notification_id}
            )

    # =========================================================================
    # Reading & housekeeping
    # =========================================================================

    def list_notifications(
        self,
        user_id: str,
        unread_only: bool = False,
        category: Optional[NotificationCategory] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Notification], int]:
        """Page of notifications, newest first, and the total matching"""
        items = self.repo.get_notifications_for_user(
            user_id, skip=skip, limit=limit, unread_only=unread_only, category=category
        )
        total = self.repo.count_for_user(user_id, unread_only=unread_only, category=category)
        return items, total

    def get_notification(self, notification_id: str, user_id: str) -> Notification:
        notification = self.repo.get_notification(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        return notification

    def get_unread_count(self, user_id: str) -> int:
        return self.repo.get_unread_count(user_id)

    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        return self.repo.mark_as_read(notification_id, user_id)

    def mark_all_as_read(self, user_id: str) -> int:
        return self.repo.mark_all_as_read(user_id)

    def delete_notification(self, notification_id: str, user_id: str) -> None:
        if not self.repo.delete_notification(notification_id, user_id):
            raise NotificationNotFoundError(f"Notification {notification_id} not found")

    def delete_all(self, user_id: str) -> int:
        count = self.repo.delete_all_for_user(user_id)
        logger.info(f"Deleted {count} notifications", extra={"user_id": user_id})
        return count

    def cleanup_old(self, days_old: Optional[int] = None) -> int:
        return self.repo.delete_old_notifications(days_old or settings.notification_retention_days)

    def get_outbox(self, notification_id: str) -> List[OutboxEntry]:
        return self.repo.get_outbox_entries(notification_id=notification_id)

    # =========================================================================
    # Push subscriptions
    # =========================================================================

    def subscribe_push(self, user_id: str, endpoint: str, keys: Dict[str, Any]) -> PushSubscription:
        if not endpoint:
            raise ValidationError("Subscription endpoint is required")
        return self.repo.upsert_subscription(PushSubscription(
            subscription_id=generate_subscription_id(),
            user_id=user_id,
            endpoint=endpoint,
            keys={k: str(v) for k, v in (keys or {}).items()},
            created_at=utc_now()
        ))

    def unsubscribe_push(self, user_id: str, endpoint: str) -> bool:
        return self.repo.delete_subscription(user_id, endpoint)
