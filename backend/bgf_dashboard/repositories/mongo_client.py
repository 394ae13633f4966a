"""MongoDB Client - Connection and Collection Management"""
import functools
from typing import Any, Callable, Dict, Optional, TypeVar
from pymongo import MongoClient as PyMongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import settings
from ..domain.errors import StoreUnavailableError
from ..utils.logger import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Global client instance
_client: Optional[PyMongoClient] = None
_database: Optional[Database] = None


def get_client() -> PyMongoClient:
    """Get or create MongoDB client"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB: {settings.mongo_uri}")
        _client = PyMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
        )
        try:
            _client.admin.command("ping")
            logger.info("MongoDB connection successful")
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failed: {e}")
            raise StoreUnavailableError("Database is unavailable", details={"reason": str(e)})
    return _client


def get_database() -> Database:
    """Get the application database"""
    global _database
    if _database is None:
        client = get_client()
        _database = client[settings.mongo_db]
        logger.info(f"Using database: {settings.mongo_db}")
    return _database


def set_database(database: Optional[Database]) -> None:
    """Use an already opened database (tests and scripts); None resets"""
    global _database
    _database = database


def get_collection(name: str) -> Collection:
    """Get a collection from the database"""
    db = get_database()
    return db[name]


def close_connection() -> None:
    """Close MongoDB connection"""
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def store_call(func: F) -> F:
    """Translate driver failures raised by a repository method into StoreUnavailableError"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Store call {func.__qualname__} failed: {e}")
            raise StoreUnavailableError(
                "Database is unavailable",
                details={"operation": func.__qualname__}
            ) from e

    return wrapper  # type: ignore[return-value]


def create_indexes() -> None:
    """Create all required indexes"""
    db = get_database()
    logger.info("Creating MongoDB indexes...")

    users = db["users"]
    users.create_index("user_id", unique=True)
    users.create_index("email", unique=True)
    users.create_index("role")

    requests = db["requests"]
    requests.create_index("request_id", unique=True)
    requests.create_index("ticket_number")
    requests.create_index([("requester.id", ASCENDING), ("created_at", DESCENDING)])
    requests.create_index("status")
    requests.create_index("type")

    request_documents = db["request_documents"]
    request_documents.create_index("document_id", unique=True)
    request_documents.create_index("request_id")

    request_workflow = db["request_workflow"]
    request_workflow.create_index("request_id", unique=True)
    request_workflow.create_index("current_stage")
    request_workflow.create_index("assigned_to")

    request_history = db["request_history"]
    request_history.create_index("history_id", unique=True)
    request_history.create_index([("request_id", ASCENDING), ("sequence", ASCENDING)], unique=True)

    activity_logs = db["activity_logs"]
    activity_logs.create_index("log_id", unique=True)
    activity_logs.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    activity_logs.create_index("action")

    notifications = db["notifications"]
    notifications.create_index("notification_id", unique=True)
    notifications.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    notifications.create_index([("user_id", ASCENDING), ("is_read", ASCENDING)])

    notification_outbox = db["notification_outbox"]
    notification_outbox.create_index("outbox_id", unique=True)
    notification_outbox.create_index([("status", ASCENDING), ("channel", ASCENDING)])
    notification_outbox.create_index("notification_id")

    push_subscriptions = db["push_subscriptions"]
    push_subscriptions.create_index("subscription_id", unique=True)
    push_subscriptions.create_index([("user_id", ASCENDING), ("endpoint", ASCENDING)], unique=True)

    staff_access_codes = db["staff_access_codes"]
    staff_access_codes.create_index("code", unique=True)

    system_settings = db["system_settings"]
    system_settings.create_index("key", unique=True)
    system_settings.create_index("category")

    logger.info("MongoDB indexes created successfully")


def health_check() -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        get_database().command("ping")
        return {
            "status": "healthy",
            "database": settings.mongo_db,
            "connection": "ok"
        }
    except (PyMongoError, StoreUnavailableError) as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": settings.mongo_db,
            "error": str(e)
        }
