"""System Settings Service"""
from typing import Any, List, Optional

from ..domain.enums import ActivityAction
from ..domain.errors import SettingNotFoundError, ValidationError
from ..domain.models import ActorSnapshot, SystemSetting
from ..repositories.settings_repo import SystemSettingsRepository
from ..utils.time import utc_now
from .activity_log_service import ActivityLogService


class SystemSettingsService:
    """Read and maintain key/value system settings"""

    def __init__(
        self,
        repo: Optional[SystemSettingsRepository] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.repo = repo or SystemSettingsRepository()
        self.activity = activity or ActivityLogService()

    def list_settings(self, category: Optional[str] = None, public_only: bool = True) -> List[SystemSetting]:
        return self.repo.list_settings(category=category, public_only=public_only)

    def get_setting(self, key: str, public_only: bool = True) -> SystemSetting:
        setting = self.repo.get_setting(key)
        if setting is None or (public_only and not setting.is_public):
            raise SettingNotFoundError(f"Setting {key} not found")
        return setting

    def save_setting(
        self,
        actor: ActorSnapshot,
        key: str,
        value: Any,
        category: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None
    ) -> SystemSetting:
        """Create or update a setting; omitted attributes keep their stored values"""
        key = (key or "").strip()
        if not key:
            raise ValidationError("Setting key is required")

        existing = self.repo.get_setting(key)
        setting = SystemSetting(
            key=key,
            value=value,
            category=category or (existing.category if existing else "general"),
            description=description if description is not None else (existing.description if existing else None),
            is_public=is_public if is_public is not None else (existing.is_public if existing else False),
            updated_at=utc_now(),
            updated_by=actor.id
        )
        saved = self.repo.upsert_setting(setting)
        self.activity.record(
            actor, ActivityAction.UPDATE_SETTING, entity_type="system_setting", entity_id=key
        )
        return saved

    def delete_setting(self, actor: ActorSnapshot, key: str) -> None:
        self.repo.delete_setting(key)
        self.activity.record(
            actor, ActivityAction.DELETE_SETTING, entity_type="system_setting", entity_id=key
        )

    def list_categories(self) -> List[str]:
        return self.repo.list_categories()
