"""User Service - Account management for administrators"""
from typing import Any, Dict, List, Optional, Tuple

from ..domain.enums import ActivityAction, UserRole, UserStatus
from ..domain.errors import ValidationError
from ..domain.models import ActorSnapshot, User
from ..repositories.user_repo import UserRepository
from ..utils.idgen import generate_user_id
from ..utils.time import utc_now
from ..utils.logger import get_logger
from .activity_log_service import ActivityLogService
from .auth_service import hash_password, validate_password

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("full_name", "role", "status", "phone_number")


class UserService:
    """CRUD for user accounts"""

    def __init__(
        self,
        repo: Optional[UserRepository] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.repo = repo or UserRepository()
        self.activity = activity or ActivityLogService()

    def list_users(
        self,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[User], int]:
        return self.repo.list_users(
            role=role.value if role else None,
            status=status.value if status else None,
            search=search,
            skip=skip,
            limit=limit
        )

    def get_user(self, user_id: str) -> User:
        return self.repo.get_user_or_raise(user_id)

    def create_user(
        self,
        actor: ActorSnapshot,
        email: str,
        password: str,
        full_name: str,
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.ACTIVE,
        phone_number: Optional[str] = None
    ) -> User:
        if not full_name or not full_name.strip():
            raise ValidationError("Full name is required")
        validate_password(password)

        now = utc_now()
        user = User(
            user_id=generate_user_id(),
            email=email,
            full_name=full_name.strip(),
            role=role,
            status=status,
            phone_number=phone_number,
            created_at=now,
            updated_at=now
        )
        self.repo.create_user(user, hash_password(password))
        self.activity.record(
            actor, ActivityAction.CREATE_USER, entity_type="user", entity_id=user.user_id,
            details={"email": user.email, "role": user.role.value}
        )
        return user

    def update_user(self, actor: ActorSnapshot, user_id: str, changes: Dict[str, Any]) -> User:
        updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        if not updates:
            raise ValidationError("No updatable fields provided", details={"allowed": list(UPDATABLE_FIELDS)})

        for key in ("role", "status"):
            if key in updates:
                updates[key] = getattr(updates[key], "value", updates[key])

        user = self.repo.update_user(user_id, updates)
        self.activity.record(
            actor, ActivityAction.UPDATE_USER, entity_type="user", entity_id=user_id,
            details={"fields": sorted(updates)}
        )
        return user

    def delete_user(self, actor: ActorSnapshot, user_id: str) -> None:
        if actor.id == user_id:
            raise ValidationError("You cannot delete your own account")
        self.repo.delete_user(user_id)
        self.activity.record(actor, ActivityAction.DELETE_USER, entity_type="user", entity_id=user_id)

    def count_by_role(self) -> Dict[str, int]:
        return self.repo.count_by_role()
