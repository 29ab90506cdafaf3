"""Top-up payment schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from campus_energy.models.enums import PaymentStatus
from campus_energy.schemas.base import CamelModel


class PaymentInitialize(CamelModel):
    """Schema for starting a top-up."""

    amount: Decimal = Field(gt=0)
    units: Decimal = Field(gt=0)


class PaymentInitialized(CamelModel):
    """Reference the caller hands to the payment gateway."""

    reference: str


class PaymentReference(CamelModel):
    """Schema for verifying or failing a payment."""

    reference: str = Field(min_length=1)


class PaymentVerified(CamelModel):
    """Result of a successful verification."""

    reference: str
    units_added: Decimal
    remaining_kwh: Decimal


class PaymentResponse(BaseModel):
    """Schema for payment history entries."""

    id: int
    user_id: int
    line_id: int | None
    amount: Decimal
    units_added_kwh: Decimal
    status: PaymentStatus
    reference: str
    created_at: datetime
    completed_at: datetime | None

    model_config = {"from_attributes": True}
