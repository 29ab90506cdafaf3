"""Concurrent access against a file-backed database.

Each worker thread uses its own session, the way concurrent requests do.
"""

import threading
from collections.abc import Callable
from decimal import Decimal

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from campus_energy import models  # noqa: F401
from campus_energy.core.database import Base
from campus_energy.models.alert import Alert
from campus_energy.models.block import Block
from campus_energy.models.control_command import ControlCommand
from campus_energy.models.device import Device
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.enums import AlertType, CommandType, PaymentStatus
from campus_energy.models.line import Line
from campus_energy.models.payment import Payment
from campus_energy.models.user import User
from campus_energy.schemas.telemetry import TelemetryReport
from campus_energy.services.control_queue import claim_next_command
from campus_energy.services.telemetry import ingest_telemetry
from campus_energy.services.topup import verify_payment


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory for a SQLite file shared between threads."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def metered_line(file_sessions):
    """A block with one device and one funded line; returns their ids."""
    with file_sessions() as session:
        block = Block(name="Hostel C")
        session.add(block)
        session.flush()
        device = Device(block_id=block.id, name="esp32-c", device_token="token-block-c")
        line = Line(
            block_id=block.id,
            line_number=1,
            current_quota_kwh=Decimal("1000"),
            remaining_kwh=Decimal("100"),
            max_current_a=Decimal("20"),
            max_power_w=Decimal("4400"),
            idle_limit_hours=24,
        )
        session.add_all([device, line])
        session.commit()
        return {"device_id": device.id, "line_id": line.id}


def run_workers(count: int, target: Callable[[int], None]) -> list[BaseException]:
    """Start ``count`` threads at once and collect unexpected errors."""
    barrier = threading.Barrier(count)
    errors: list[BaseException] = []

    def worker(index: int) -> None:
        barrier.wait()
        try:
            target(index)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


class TestConcurrentTelemetry:
    """Parallel reports for one line."""

    def test_no_lost_deductions(self, file_sessions, metered_line) -> None:
        """Test that every report is deducted exactly once."""
        workers, reports_each = 8, 5

        def report(_: int) -> None:
            with file_sessions() as session:
                device = session.get(Device, metered_line["device_id"])
                for _ in range(reports_each):
                    ingest_telemetry(
                        session,
                        device,
                        TelemetryReport(
                            line_id=metered_line["line_id"],
                            power_w=Decimal("600"),
                            voltage_v=Decimal("230"),
                            current_a=Decimal("2.5"),
                            energy_kwh=Decimal("1.5"),
                        ),
                    )

        assert run_workers(workers, report) == []

        with file_sessions() as session:
            line = session.get(Line, metered_line["line_id"])
            assert line.remaining_kwh == Decimal("100") - Decimal("1.5") * workers * reports_each
            logs = session.execute(select(func.count()).select_from(EnergyLog)).scalar_one()
            assert logs == workers * reports_each

    def test_single_depletion_alert(self, file_sessions, metered_line) -> None:
        """Test that racing reports exhausting the quota raise one disconnection alert."""
        with file_sessions() as session:
            session.get(Line, metered_line["line_id"]).remaining_kwh = Decimal("4")
            session.commit()

        def report(_: int) -> None:
            with file_sessions() as session:
                device = session.get(Device, metered_line["device_id"])
                ingest_telemetry(
                    session,
                    device,
                    TelemetryReport(
                        line_id=metered_line["line_id"],
                        power_w=Decimal("600"),
                        voltage_v=Decimal("230"),
                        current_a=Decimal("2.5"),
                        energy_kwh=Decimal("1"),
                    ),
                )

        assert run_workers(10, report) == []

        with file_sessions() as session:
            assert session.get(Line, metered_line["line_id"]).remaining_kwh == Decimal("0")
            disconnections = session.execute(
                select(func.count())
                .select_from(Alert)
                .where(Alert.type == AlertType.DISCONNECTION)
            ).scalar_one()
            assert disconnections == 1


class TestConcurrentClaims:
    """Parallel polls for one queued command."""

    def test_command_claimed_once(self, file_sessions, metered_line) -> None:
        """Test that exactly one poller receives the command."""
        with file_sessions() as session:
            session.add(
                ControlCommand(line_id=metered_line["line_id"], command=CommandType.DISCONNECT)
            )
            session.commit()

        claims = []

        def claim(_: int) -> None:
            with file_sessions() as session:
                claimed = claim_next_command(session, metered_line["line_id"])
                session.commit()
                if claimed is not None:
                    claims.append(claimed)

        assert run_workers(10, claim) == []
        assert len(claims) == 1
        assert claims[0].command == CommandType.DISCONNECT


class TestConcurrentVerification:
    """Parallel verification of one payment reference."""

    def test_credited_once(self, file_sessions, metered_line) -> None:
        """Test that racing verifications credit the line a single time."""
        with file_sessions() as session:
            user = User(
                email="payer@campus.edu",
                hashed_password="x",
                line_id=metered_line["line_id"],
            )
            session.add(user)
            session.flush()
            session.add(
                Payment(
                    user_id=user.id,
                    line_id=metered_line["line_id"],
                    amount=Decimal("2500"),
                    units_added_kwh=Decimal("25"),
                    status=PaymentStatus.PENDING,
                    reference="TOPUP-RACE",
                )
            )
            session.commit()
            user_id = user.id

        outcomes = []

        def verify(_: int) -> None:
            with file_sessions() as session:
                payer = session.get(User, user_id)
                try:
                    verify_payment(session, payer, "TOPUP-RACE")
                    outcomes.append(200)
                except HTTPException as exc:
                    outcomes.append(exc.status_code)

        assert run_workers(10, verify) == []
        assert sorted(outcomes) == [200] + [409] * 9

        with file_sessions() as session:
            assert session.get(Line, metered_line["line_id"]).remaining_kwh == Decimal("125")
