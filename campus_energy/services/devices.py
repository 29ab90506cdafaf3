"""Device registry and device authentication."""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_energy.core.clock import as_utc
from campus_energy.core.config import settings
from campus_energy.models.device import Device
from campus_energy.models.line import Line
from campus_energy.schemas.device import DeviceCreate
from campus_energy.services.blocks import get_block

logger = logging.getLogger(__name__)


def register_device(db: Session, data: DeviceCreate) -> Device:
    """Register a device for a block and issue its token."""
    get_block(db, data.block_id)
    device = Device(
        block_id=data.block_id,
        name=data.name,
        device_token=secrets.token_hex(16),
    )
    db.add(device)
    db.commit()
    db.refresh(device)
    logger.info("Registered device %s for block %s", device.id, device.block_id)
    return device


def list_devices(db: Session, block_id: int | None = None) -> list[Device]:
    """List devices, flagging those not seen recently as offline."""
    query = db.query(Device)
    if block_id is not None:
        query = query.filter(Device.block_id == block_id)
    devices = query.order_by(Device.id).all()

    cutoff = datetime.now(UTC) - timedelta(seconds=settings.DEVICE_OFFLINE_AFTER_SECONDS)
    changed = False
    for device in devices:
        if device.is_online and (
            device.last_seen_at is None or as_utc(device.last_seen_at) < cutoff
        ):
            device.is_online = False
            changed = True
    if changed:
        db.commit()
    return devices


def authenticate_device(
    db: Session,
    device_token: str | None,
    block_id: int | None = None,
) -> Device:
    """Resolve a device from its token, optionally checking its block pairing."""
    if not device_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Device token required",
        )
    device = db.query(Device).filter(Device.device_token == device_token).first()
    if not device:
        logger.warning("Rejected unknown device token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid device token",
        )
    if block_id is not None and device.block_id != block_id:
        logger.warning("Device %s is not paired with block %s", device.id, block_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Device is not paired with this block",
        )
    return device


def authorize_line(db: Session, device: Device, line_id: int) -> None:
    """Ensure the line exists and belongs to the device's block."""
    block_id = db.execute(select(Line.block_id).where(Line.id == line_id)).scalar_one_or_none()
    if block_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Line not found",
        )
    if block_id != device.block_id:
        logger.warning(
            "Device %s tried to act on line %s of block %s", device.id, line_id, block_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Line does not belong to the device's block",
        )


def record_heartbeat(db: Session, device_token: str, block_id: int) -> datetime:
    """Mark the device online and return the server time."""
    device = authenticate_device(db, device_token, block_id)
    now = datetime.now(UTC)
    device.last_seen_at = now
    device.is_online = True
    db.commit()
    logger.debug("Heartbeat from device %s", device.id)
    return now

