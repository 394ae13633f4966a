"""Staff Access Code Repository"""
from typing import List
from pymongo.collection import Collection
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection, store_call
from ..domain.models import StaffAccessCode
from ..domain.errors import AlreadyExistsError, NotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class StaffAccessCodeRepository:
    """Repository for staff access codes"""

    def __init__(self):
        self._codes: Collection = get_collection("staff_access_codes")

    def list_codes(self) -> List[StaffAccessCode]:
        """All stored codes. Driver errors propagate so callers can fall back."""
        codes = []
        for doc in self._codes.find({}).sort("code", ASCENDING):
            doc.pop("_id", None)
            codes.append(StaffAccessCode.model_validate(doc))
        return codes

    @store_call
    def create_code(self, access_code: StaffAccessCode) -> StaffAccessCode:
        doc = access_code.model_dump(mode="json")
        doc["_id"] = access_code.code
        if self._codes.find_one({"code": access_code.code}) is not None:
            raise AlreadyExistsError(f"Access code {access_code.code} already exists")
        try:
            self._codes.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(f"Access code {access_code.code} already exists")

        logger.info(f"Created staff access code for {access_code.name}", extra={"role": access_code.role.value})
        return access_code

    @store_call
    def upsert_code(self, access_code: StaffAccessCode) -> bool:
        """Insert or replace a code. Returns True when it was newly inserted."""
        doc = access_code.model_dump(mode="json")
        result = self._codes.update_one(
            {"code": access_code.code},
            {"$set": doc},
            upsert=True
        )
        return result.upserted_id is not None

    @store_call
    def delete_code(self, code: str) -> None:
        result = self._codes.delete_one({"code": code})
        if result.deleted_count == 0:
            raise NotFoundError(f"Access code {code} not found")
        logger.info(f"Deleted staff access code {code}")
