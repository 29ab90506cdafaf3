"""Device registry schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class DeviceCreate(BaseModel):
    """Schema for registering a device in a block."""

    block_id: int
    name: str | None = Field(default=None, max_length=100)


class DeviceResponse(BaseModel):
    """Schema for device response."""

    id: int
    block_id: int
    name: str | None
    device_token: str
    last_seen_at: datetime | None
    is_online: bool
    created_at: datetime

    model_config = {"from_attributes": True}
