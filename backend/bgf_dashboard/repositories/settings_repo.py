"""System Settings Repository"""
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING, ReturnDocument

from .mongo_client import get_collection, store_call
from ..domain.models import SystemSetting
from ..domain.errors import SettingNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SystemSettingsRepository:
    """Key/value settings keyed by `key`"""

    def __init__(self):
        self._settings: Collection = get_collection("system_settings")

    @store_call
    def list_settings(
        self,
        category: Optional[str] = None,
        public_only: bool = False
    ) -> List[SystemSetting]:
        query = {}
        if category:
            query["category"] = category
        if public_only:
            query["is_public"] = True

        items = []
        for doc in self._settings.find(query).sort([("category", ASCENDING), ("key", ASCENDING)]):
            doc.pop("_id", None)
            items.append(SystemSetting.model_validate(doc))
        return items

    @store_call
    def get_setting(self, key: str) -> Optional[SystemSetting]:
        doc = self._settings.find_one({"key": key})
        if doc:
            doc.pop("_id", None)
            return SystemSetting.model_validate(doc)
        return None

    @store_call
    def upsert_setting(self, setting: SystemSetting) -> SystemSetting:
        doc = setting.model_dump(mode="json")
        result = self._settings.find_one_and_update(
            {"key": setting.key},
            {"$set": doc},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        result.pop("_id", None)
        logger.info(f"Saved system setting {setting.key}")
        return SystemSetting.model_validate(result)

    @store_call
    def delete_setting(self, key: str) -> None:
        result = self._settings.delete_one({"key": key})
        if result.deleted_count == 0:
            raise SettingNotFoundError(f"Setting {key} not found")

    @store_call
    def list_categories(self) -> List[str]:
        return sorted(self._settings.distinct("category"))
