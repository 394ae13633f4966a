"""Notification Repository - In-app notifications, outbox and push subscriptions"""
from typing import Any, Dict, List, Optional
from datetime import timedelta
from pymongo.collection import Collection
from pymongo import DESCENDING, ReturnDocument

from .mongo_client import get_collection, store_call
from ..domain.models import Notification, OutboxEntry, PushSubscription
from ..domain.enums import NotificationCategory, OutboxStatus
from ..domain.errors import NotificationNotFoundError
from ..utils.logger import get_logger
from ..utils.time import format_iso, utc_now

logger = get_logger(__name__)


class NotificationRepository:
    """Repository for in-app notification operations"""

    def __init__(self):
        self._notifications: Collection = get_collection("notifications")
        self._outbox: Collection = get_collection("notification_outbox")
        self._subscriptions: Collection = get_collection("push_subscriptions")

    # =========================================================================
    # In-app notifications
    # =========================================================================

    @store_call
    def create_notification(self, notification: Notification) -> Notification:
        doc = notification.model_dump(mode="json")
        doc["_id"] = notification.notification_id
        self._notifications.insert_one(doc)

        logger.info(
            f"Created notification for {notification.user_id}",
            extra={
                "notification_id": notification.notification_id,
                "user_id": notification.user_id,
            }
        )
        return notification

    @store_call
    def get_notifications_for_user(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 50,
        unread_only: bool = False,
        category: Optional[NotificationCategory] = None
    ) -> List[Notification]:
        """Get notifications for a user, newest first"""
        query = self._user_query(user_id, unread_only, category)
        cursor = self._notifications.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)

        notifications = []
        for doc in cursor:
            doc.pop("_id", None)
            notifications.append(Notification.model_validate(doc))
        return notifications

    @store_call
    def count_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        category: Optional[NotificationCategory] = None
    ) -> int:
        return self._notifications.count_documents(self._user_query(user_id, unread_only, category))

    @staticmethod
    def _user_query(
        user_id: str,
        unread_only: bool = False,
        category: Optional[NotificationCategory] = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            query["is_read"] = False
        if category:
            query["category"] = NotificationCategory(category).value
        return query

    @store_call
    def get_unread_count(self, user_id: str) -> int:
        return self._notifications.count_documents({"user_id": user_id, "is_read": False})

    @store_call
    def get_notification(self, notification_id: str) -> Optional[Notification]:
        doc = self._notifications.find_one({"notification_id": notification_id})
        if doc:
            doc.pop("_id", None)
            return Notification.model_validate(doc)
        return None

    @store_call
    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark one of the user's notifications as read"""
        result = self._notifications.find_one_and_update(
            {"notification_id": notification_id, "user_id": user_id},
            {"$set": {"is_read": True, "read_at": format_iso(utc_now())}},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")

        result.pop("_id", None)
        return Notification.model_validate(result)

    @store_call
    def mark_all_as_read(self, user_id: str) -> int:
        """Mark all notifications as read for a user. Returns count of updated."""
        result = self._notifications.update_many(
            {"user_id": user_id, "is_read": False},
            {"$set": {"is_read": True, "read_at": format_iso(utc_now())}}
        )
        logger.info(f"Marked {result.modified_count} notifications as read", extra={"user_id": user_id})
        return result.modified_count

    @store_call
    def delete_notification(self, notification_id: str, user_id: str) -> bool:
        """Delete a notification. Returns True if deleted."""
        result = self._notifications.delete_one(
            {"notification_id": notification_id, "user_id": user_id}
        )
        return result.deleted_count > 0

    @store_call
    def delete_all_for_user(self, user_id: str) -> int:
        result = self._notifications.delete_many({"user_id": user_id})
        return result.deleted_count

    @store_call
    def delete_old_notifications(self, days_old: int = 90) -> int:
        """Delete notifications older than specified days. Returns count deleted."""
        cutoff = format_iso(utc_now() - timedelta(days=days_old))
        result = self._notifications.delete_many({"created_at": {"$lt": cutoff}})
        if result.deleted_count > 0:
            logger.info(f"Cleaned up {result.deleted_count} old notifications")
        return result.deleted_count

    # =========================================================================
    # Outbox
    # =========================================================================

    @store_call
    def enqueue(self, entry: OutboxEntry) -> OutboxEntry:
        doc = entry.model_dump(mode="json")
        doc["_id"] = entry.outbox_id
        self._outbox.insert_one(doc)
        logger.info(
            f"Queued {entry.channel.value} delivery",
            extra={"notification_id": entry.notification_id}
        )
        return entry

    @store_call
    def get_outbox_entries(
        self,
        notification_id: Optional[str] = None,
        status: Optional[OutboxStatus] = None
    ) -> List[OutboxEntry]:
        query: Dict[str, Any] = {}
        if notification_id:
            query["notification_id"] = notification_id
        if status:
            query["status"] = OutboxStatus(status).value

        entries = []
        for doc in self._outbox.find(query).sort("created_at", DESCENDING):
            doc.pop("_id", None)
            entries.append(OutboxEntry.model_validate(doc))
        return entries

    # =========================================================================
    # Push subscriptions
    # =========================================================================

    @store_call
    def upsert_subscription(self, subscription: PushSubscription) -> PushSubscription:
        """Register a subscription; re-registering an endpoint refreshes its keys"""
        doc = subscription.model_dump(mode="json")
        result = self._subscriptions.find_one_and_update(
            {"user_id": subscription.user_id, "endpoint": subscription.endpoint},
            {
                "$set": {"keys": doc["keys"]},
                "$setOnInsert": {
                    "subscription_id": subscription.subscription_id,
                    "created_at": doc["created_at"],
                },
            },
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        result.pop("_id", None)
        return PushSubscription.model_validate(result)

    @store_call
    def get_subscriptions(self, user_id: str) -> List[PushSubscription]:
        subscriptions = []
        for doc in self._subscriptions.find({"user_id": user_id}):
            doc.pop("_id", None)
            subscriptions.append(PushSubscription.model_validate(doc))
        return subscriptions

    @store_call
    def delete_subscription(self, user_id: str, endpoint: str) -> bool:
        result = self._subscriptions.delete_one({"user_id": user_id, "endpoint": endpoint})
        return result.deleted_count > 0
