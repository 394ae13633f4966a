"""
Seed Data Script - Creates sample accounts and requests for local testing
Run: python -m scripts.seed_data
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bgf_dashboard.domain.enums import RequestType, UserRole
from bgf_dashboard.domain.errors import AlreadyExistsError
from bgf_dashboard.domain.models import ActorSnapshot
from bgf_dashboard.repositories.mongo_client import create_indexes, get_collection
from bgf_dashboard.services.request_service import RequestService
from bgf_dashboard.services.user_service import UserService

SEED_ACTOR = ActorSnapshot(id="system", name="Seed Script", role=UserRole.ADMIN, is_staff=True)

SEED_PASSWORD = "ChangeMe123!"

SEED_USERS = [
    ("admin@bgf-dashboard.org", "BGF Administrator", UserRole.ADMIN),
    ("hop@bgf-dashboard.org", "Head of Programs", UserRole.HEAD_OF_PROGRAMS),
    ("beneficiary@bgf-dashboard.org", "Sample Beneficiary", UserRole.USER),
]

SEED_REQUESTS = [
    ("University tuition support", RequestType.SCHOLARSHIP, 2500.0),
    ("Community borehole", RequestType.WASH, 12000.0),
    ("School feeding program", RequestType.FOOD_NUTRITION, 4800.0),
]


def seed_users():
    service = UserService()
    created = {}
    for email, name, role in SEED_USERS:
        try:
            user = service.create_user(SEED_ACTOR, email, SEED_PASSWORD, name, role=role)
            print(f"Created {role.value}: {email}")
        except AlreadyExistsError:
            user = service.repo.get_user_by_email(email)
            print(f"Exists {role.value}: {email}")
        created[email] = user
    return created


def seed_requests(beneficiary):
    if get_collection("requests").count_documents({"requester.id": beneficiary.user_id}) > 0:
        print("Beneficiary already has requests. Skipping request seed.")
        return

    service = RequestService()
    identity = beneficiary.to_identity()
    for title, request_type, amount in SEED_REQUESTS:
        request = service.create_request(
            identity, title=title, request_type=request_type,
            description=f"Sample {request_type.value} request", amount=amount
        )
        print(f"Created request {request.ticket_number}: {title}")


if __name__ == "__main__":
    create_indexes()
    users = seed_users()
    seed_requests(users["beneficiary@bgf-dashboard.org"])
    print(f"\nSeed complete. Password for all seeded accounts: {SEED_PASSWORD}")
