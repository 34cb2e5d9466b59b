"""Decide whether a peripheral is a compatible DaFit watch.

A candidate must expose the device information, battery and vendor transfer
services with all of their characteristics, and report the exact accepted
Manufacturer Name String. Any failure rejects the candidate; nothing is
retried, the caller moves on to the next one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from bleak.uuids import normalize_uuid_str

from .exceptions import BLEConnectionError, BLETimeoutError
from .models.descriptor import DeviceDescriptor
from .models.verdict import QualificationVerdict
from .protocol.commands import (
    ACCEPTED_MANUFACTURER,
    BATTERY_LEVEL_UUID,
    MANUFACTURER_NAME_UUID,
    REQUIRED_CHARACTERISTICS,
    REQUIRED_SERVICES,
    SERIAL_NUMBER_UUID,
    SOFTWARE_REVISION_UUID,
)

if TYPE_CHECKING:
    from .config import UploaderConfig
    from .transport import BLEConnection

_LOGGER = logging.getLogger(__name__)


def _normalize(uuids: Iterable[str]) -> set[str]:
    return {normalize_uuid_str(uuid) for uuid in uuids}


def missing_services(service_uuids: Iterable[str]) -> list[str]:
    """Required services absent from service_uuids, sorted."""
    return sorted(REQUIRED_SERVICES - _normalize(service_uuids))


def missing_characteristics(characteristic_uuids: Iterable[str]) -> list[str]:
    """Required characteristics absent from characteristic_uuids, sorted."""
    return sorted(REQUIRED_CHARACTERISTICS - _normalize(characteristic_uuids))


def check_manufacturer(manufacturer: str) -> str | None:
    """Return a rejection reason unless manufacturer is the accepted string."""
    if manufacturer != ACCEPTED_MANUFACTURER:
        return f"manufacturer {manufacturer!r} is not {ACCEPTED_MANUFACTURER!r}"
    return None


def _capability_reason(
        service_uuids: Iterable[str],
        characteristic_uuids: Iterable[str],
) -> str | None:
    missing = missing_services(service_uuids)
    if missing:
        return f"missing services: {', '.join(missing)}"

    missing = missing_characteristics(characteristic_uuids)
    if missing:
        return f"missing characteristics: {', '.join(missing)}"

    return None


def evaluate(
        service_uuids: Iterable[str],
        characteristic_uuids: Iterable[str],
        descriptor: DeviceDescriptor,
) -> QualificationVerdict:
    """Verdict for already gathered capabilities and descriptor.

    Independent of the order identifiers are listed in.
    """
    reason = _capability_reason(service_uuids, characteristic_uuids)
    if reason is None:
        reason = check_manufacturer(descriptor.manufacturer)
    if reason is not None:
        return QualificationVerdict.incompatible(reason)
    return QualificationVerdict.qualified(descriptor)


def matches_filters(name: str, address: str, config: UploaderConfig) -> bool:
    """Check advertised identity against the configured name/address filters."""
    if config.name_filter and name != config.name_filter:
        return False
    if config.address_filter and address.upper() != config.address_filter.upper():
        return False
    return True


async def read_descriptor(connection: BLEConnection) -> DeviceDescriptor:
    """Read the four descriptive characteristics.

    Raises:
        BLEConnectionError: If a read fails
        ValueError: If the battery level read returned no data
    """
    software_revision = await connection.read(SOFTWARE_REVISION_UUID)
    serial_number = await connection.read(SERIAL_NUMBER_UUID)
    manufacturer = await connection.read(MANUFACTURER_NAME_UUID)
    battery_level = await connection.read(BATTERY_LEVEL_UUID)

    return DeviceDescriptor.from_raw(
        manufacturer=manufacturer,
        software_revision=software_revision,
        serial_number=serial_number,
        battery_level=battery_level,
        name=connection.name,
        address=connection.address,
    )


async def qualify(connection: BLEConnection, config: UploaderConfig) -> QualificationVerdict:
    """Qualify one candidate peripheral.

    Args:
        connection: Connection handle for the candidate (may be disconnected)
        config: Session configuration carrying the name/address filters

    Returns:
        QualificationVerdict, never raises for candidate problems
    """
    name = connection.name or ""
    address = connection.address

    if not matches_filters(name, address, config):
        _LOGGER.debug("Skipping %s (%s): does not match filters", name, address)
        return QualificationVerdict.name_mismatch()

    if not connection.is_connected:
        _LOGGER.info("Connecting to %s (%s)", name, address)
        try:
            await connection.connect()
        except (BLEConnectionError, BLETimeoutError) as e:
            _LOGGER.error("Error connecting to %s: %s", address, e)
            return QualificationVerdict.name_mismatch(f"connection failed: {e}")

    try:
        service_uuids = connection.service_uuids()
        characteristic_uuids = connection.characteristic_uuids()
    except BLEConnectionError as e:
        return QualificationVerdict.incompatible(f"service discovery failed: {e}")

    _LOGGER.debug(
        "%s exposes %d services, %d characteristics",
        address,
        len(service_uuids),
        len(characteristic_uuids),
    )

    reason = _capability_reason(service_uuids, characteristic_uuids)
    if reason is not None:
        _LOGGER.info("%s is not a compatible device: %s", address, reason)
        return QualificationVerdict.incompatible(reason)

    try:
        descriptor = await read_descriptor(connection)
    except (BLEConnectionError, BLETimeoutError, ValueError) as e:
        _LOGGER.info("%s: reading device information failed: %s", address, e)
        return QualificationVerdict.incompatible(f"device information read failed: {e}")

    _LOGGER.info(
        "%s: manufacturer=%s software=%s serial=%s battery=%d",
        address,
        descriptor.manufacturer,
        descriptor.software_revision,
        descriptor.serial_number,
        descriptor.battery_level,
    )

    reason = check_manufacturer(descriptor.manufacturer)
    if reason is not None:
        _LOGGER.info("%s is not a compatible device: %s", address, reason)
        return QualificationVerdict.incompatible(reason)

    return QualificationVerdict.qualified(descriptor)
