import random

from app.db import Base, SessionLocal, engine
from app.models.user import User
from app.models.wearable_profile import WearableProfile
from app.core.time_utils import seconds_to_hours, utcnow
from app.services.profile_store import ProfileStore


DEMO_DOMAIN = "demo.wellness.local"


def clear_demo_users(db) -> None:
    """Delete demo users and their profiles so we can reseed cleanly."""
    ids = [u.id for u in db.query(User.id).filter(User.email.like(f"%@{DEMO_DOMAIN}")).all()]
    if ids:
        db.query(WearableProfile).filter(WearableProfile.user_id.in_(ids)).delete(
            synchronize_session=False
        )
        db.query(User).filter(User.id.in_(ids)).delete(synchronize_session=False)
        db.commit()


def seed_demo_profiles(db, clients: int = 5) -> None:
    """Insert one partner with `clients` connected clients, each with a wearable profile."""
    partner = User(
        email=f"coach@{DEMO_DOMAIN}",
        first_name="Dana",
        last_name="Coach",
        is_partner=True,
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)

    store = ProfileStore(db)
    now = utcnow()
    for i in range(clients):
        client = User(
            email=f"client{i + 1}@{DEMO_DOMAIN}",
            first_name="Client",
            last_name=str(i + 1),
            connected_partner_id=partner.id,
        )
        db.add(client)
        db.commit()
        db.refresh(client)

        store.upsert(
            client.id,
            {
                "last_event": "daily.data.steps.created",
                "last_updated": now,
                "updated_at": now,
                "steps": random.randint(4000, 16000),
                "heart_rate": random.randint(55, 80),
                "sleep_hours": seconds_to_hours(random.randint(5 * 3600, 9 * 3600)),
                "calories": random.randint(1800, 3000),
                "blood_pressure_systolic": random.randint(105, 135),
                "blood_pressure_diastolic": random.randint(65, 88),
            },
        )

    print(f"Seeded partner {partner.id} with {clients} demo clients")


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        clear_demo_users(db)
        seed_demo_profiles(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
