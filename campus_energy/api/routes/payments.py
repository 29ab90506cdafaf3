"""Top-up payment routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import get_current_user
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.payment import (
    PaymentInitialize,
    PaymentInitialized,
    PaymentReference,
    PaymentResponse,
    PaymentVerified,
)
from campus_energy.services import topup as topup_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/initialize",
    response_model=PaymentInitialized,
    status_code=status.HTTP_201_CREATED,
)
def initialize_payment(
    data: PaymentInitialize,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentInitialized:
    """Start a top-up and get the reference to pay against."""
    payment = topup_service.initialize_payment(db, current_user, data)
    return PaymentInitialized(reference=payment.reference)


@router.post("/verify", response_model=PaymentVerified)
def verify_payment(
    data: PaymentReference,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentVerified:
    """Confirm a payment and credit the quota. Repeat calls return 409."""
    return topup_service.verify_payment(db, current_user, data.reference)


@router.post("/fail", response_model=PaymentResponse)
def fail_payment(
    data: PaymentReference,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentResponse:
    """Record that the gateway rejected a payment."""
    return PaymentResponse.model_validate(
        topup_service.fail_payment(db, current_user, data.reference)
    )


@router.get("", response_model=list[PaymentResponse])
def list_payments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PaymentResponse]:
    """Payment history for the caller (all payments for admins)."""
    payments = topup_service.list_payments(db, current_user)
    return [PaymentResponse.model_validate(p) for p in payments]
