"""Seed script to populate the database with sample data.

Run with ``python -m campus_energy.seed``.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_energy import models  # noqa: F401
from campus_energy.core.config import settings
from campus_energy.core.database import Base, SessionLocal, engine
from campus_energy.models.block import Block
from campus_energy.models.device import Device
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.enums import LineStatus, UserRole
from campus_energy.models.line import Line
from campus_energy.models.user import User
from campus_energy.services.auth import get_password_hash

SEED_PASSWORD = "changeme123"
SEED_DEVICE_TOKEN = "seed-device-hostel-a"


def seed_database(db: Session) -> bool:
    """Seed the database with sample data. Returns False if data already exists."""
    if db.execute(select(Block.id)).first():
        print("Database already has data. Skipping seed.")
        return False

    print("Seeding database...")

    block = Block(name="Hostel A", total_quota_kwh=Decimal("400"))
    db.add(block)
    db.flush()
    print(f"Created block: {block.name} (ID: {block.id})")

    # Line 3 starts nearly empty so the low balance flow can be tried right away
    balances = [Decimal("100"), Decimal("45"), Decimal("8"), Decimal("0")]
    lines = [
        Line(
            block_id=block.id,
            line_number=number,
            current_quota_kwh=Decimal("100"),
            remaining_kwh=remaining,
            status=LineStatus.ACTIVE if remaining > 0 else LineStatus.DISCONNECTED,
            max_current_a=settings.DEFAULT_MAX_CURRENT_A,
            max_power_w=settings.DEFAULT_MAX_POWER_W,
            idle_limit_hours=settings.DEFAULT_IDLE_LIMIT_HOURS,
        )
        for number, remaining in enumerate(balances, start=1)
    ]
    db.add_all(lines)
    db.flush()
    print(f"Created {len(lines)} lines")

    device = Device(block_id=block.id, name="esp32-hostel-a", device_token=SEED_DEVICE_TOKEN)
    admin = User(
        email="admin@example.com",
        hashed_password=get_password_hash(SEED_PASSWORD),
        role=UserRole.ADMIN,
    )
    students = [
        User(
            email=f"student{line.line_number}@example.com",
            hashed_password=get_password_hash(SEED_PASSWORD),
            role=UserRole.STUDENT,
            block_id=block.id,
            line_id=line.id,
        )
        for line in lines
    ]
    db.add_all([device, admin, *students])

    # One report per day for the past week on the first two lines
    now = datetime.now(UTC)
    for day in range(7):
        for line, daily_kwh in ((lines[0], Decimal("3.2")), (lines[1], Decimal("5.5"))):
            db.add(
                EnergyLog(
                    line_id=line.id,
                    timestamp=now - timedelta(days=day, hours=2),
                    power_w=Decimal("650"),
                    voltage_v=Decimal("230"),
                    current_a=Decimal("2.8"),
                    energy_kwh=daily_kwh,
                )
            )

    db.commit()

    print("\nSeed data created successfully!")
    print(f"Admin login: admin@example.com / {SEED_PASSWORD}")
    print(f"Students: student1..student{len(lines)}@example.com / {SEED_PASSWORD}")
    print(f"Device token for block {block.id}: {SEED_DEVICE_TOKEN}")
    return True


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_database(session)
