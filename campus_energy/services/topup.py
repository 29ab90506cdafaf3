"""Top-up ledger: payment initialization and idempotent verification.

Verification flips the payment from pending to completed with a conditional
UPDATE. Only the call that performs that transition credits the line; any
repeat or concurrent verification of the same reference finds nothing
pending and fails without touching the balance. The payment, the credit and
the confirmation alert commit together.
"""

import logging
import secrets
from datetime import UTC, datetime
from decimal import Decimal
from typing import NoReturn

from fastapi import HTTPException, status
from sqlalchemy import false, select, update
from sqlalchemy.orm import Session

from campus_energy.models.enums import AlertType, PaymentStatus, UserRole
from campus_energy.models.line import Line
from campus_energy.models.payment import Payment
from campus_energy.models.user import User
from campus_energy.schemas.payment import PaymentInitialize, PaymentVerified
from campus_energy.services.alerts import create_alert
from campus_energy.services.line_status import merge_line_status_expr, round_balance_expr

logger = logging.getLogger(__name__)


def generate_reference() -> str:
    """Fresh payment reference, unique per initialization."""
    return f"TOPUP-{secrets.token_hex(8).upper()}"


def initialize_payment(db: Session, user: User, data: PaymentInitialize) -> Payment:
    """Create a pending payment for the user's line."""
    if user.line_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You must be assigned to a line before topping up",
        )

    payment = Payment(
        user_id=user.id,
        line_id=user.line_id,
        amount=data.amount,
        units_added_kwh=data.units,
        status=PaymentStatus.PENDING,
        reference=generate_reference(),
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(
        "Initialized payment %s for user %s: %s kWh", payment.reference, user.id, data.units
    )
    return payment


def _pending_payment_filter(user: User, reference: str) -> list:
    """Conditions selecting the caller's still-pending payment."""
    conditions = [
        Payment.reference == reference,
        Payment.status == PaymentStatus.PENDING,
    ]
    if user.role != UserRole.ADMIN:
        conditions.append(Payment.user_id == user.id)
    return conditions


def _raise_not_pending(db: Session, user: User, reference: str) -> NoReturn:
    """Explain why a conditional payment update matched nothing."""
    payment = db.execute(select(Payment).where(Payment.reference == reference)).scalar_one_or_none()
    if payment is None or (user.role != UserRole.ADMIN and payment.user_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found",
        )
    logger.warning("Payment %s already processed (%s)", reference, payment.status)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Payment already processed ({payment.status})",
    )


def verify_payment(db: Session, user: User, reference: str) -> PaymentVerified:
    """Complete a pending payment and credit the payer's line exactly once.

    The payment is re-pointed at the payer's current line, so the record
    always names the line that received the units.
    """
    payer_line = select(User.line_id).where(User.id == Payment.user_id).scalar_subquery()
    claimed = db.execute(
        update(Payment)
        .where(*_pending_payment_filter(user, reference))
        .values(
            status=PaymentStatus.COMPLETED,
            completed_at=datetime.now(UTC),
            line_id=payer_line,
        )
        .returning(Payment.line_id, Payment.units_added_kwh)
        .execution_options(synchronize_session=False)
    ).one_or_none()
    if claimed is None:
        db.rollback()
        _raise_not_pending(db, user, reference)

    payer_line_id = claimed.line_id
    if payer_line_id is None:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payer is not assigned to a line",
        )

    units: Decimal = claimed.units_added_kwh
    credited = round_balance_expr(Line.remaining_kwh + units)
    remaining = db.execute(
        update(Line)
        .where(Line.id == payer_line_id)
        .values(
            remaining_kwh=credited,
            admin_hold=False,
            status=merge_line_status_expr(credited, false()),
        )
        .returning(Line.remaining_kwh)
        .execution_options(synchronize_session=False)
    ).scalar_one_or_none()
    if remaining is None:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Line not found",
        )

    create_alert(
        db,
        payer_line_id,
        AlertType.TOP_UP_CONFIRMATION,
        f"Top-up successful: {units:.2f} kWh added. New balance {remaining:.2f} kWh.",
    )
    db.commit()
    logger.info("Payment %s verified: credited %s kWh to line %s", reference, units, payer_line_id)
    return PaymentVerified(reference=reference, units_added=units, remaining_kwh=remaining)


def fail_payment(db: Session, user: User, reference: str) -> Payment:
    """Record a gateway failure for a pending payment."""
    updated = db.execute(
        update(Payment)
        .where(*_pending_payment_filter(user, reference))
        .values(status=PaymentStatus.FAILED)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not updated:
        db.rollback()
        _raise_not_pending(db, user, reference)
    db.commit()
    logger.info("Payment %s marked failed", reference)
    return db.execute(select(Payment).where(Payment.reference == reference)).scalar_one()


def list_payments(db: Session, user: User) -> list[Payment]:
    """Payment history; admins see every payment."""
    query = db.query(Payment)
    if user.role != UserRole.ADMIN:
        query = query.filter(Payment.user_id == user.id)
    return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()
