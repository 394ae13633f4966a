"""
Load staff access codes into MongoDB

Codes come from the STAFF_ACCESS_CODES environment variable, a JSON object
mapping code -> {"name": ..., "role": ...}. Without it the built-in codes
are written. Existing codes are updated in place.

Run: python -m scripts.migrate_staff_access_codes
"""
import json
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bgf_dashboard.domain.models import StaffAccessCode
from bgf_dashboard.repositories.staff_access_repo import StaffAccessCodeRepository
from bgf_dashboard.services.staff_access_service import DEFAULT_STAFF_ACCESS_CODES


def load_codes():
    raw = os.environ.get("STAFF_ACCESS_CODES")
    if not raw:
        print("STAFF_ACCESS_CODES not set, using built-in codes")
        return list(DEFAULT_STAFF_ACCESS_CODES.values())

    data = json.loads(raw)
    return [
        StaffAccessCode(code=code, name=entry["name"], role=entry["role"])
        for code, entry in data.items()
    ]


def migrate():
    repo = StaffAccessCodeRepository()
    inserted = updated = 0
    for access_code in load_codes():
        if repo.upsert_code(access_code):
            inserted += 1
            print(f"  + {access_code.code} ({access_code.role.value})")
        else:
            updated += 1
            print(f"  ~ {access_code.code} ({access_code.role.value})")
    print(f"\nDone: {inserted} inserted, {updated} updated")


if __name__ == "__main__":
    migrate()
