"""Qualification verdict."""

from __future__ import annotations

from dataclasses import dataclass

from .descriptor import DeviceDescriptor
from .enums import VerdictStatus


@dataclass(frozen=True)
class QualificationVerdict:
    """Accept/reject decision for one candidate peripheral.

    descriptor is only set for QUALIFIED verdicts.
    """

    status: VerdictStatus
    reason: str = ""
    descriptor: DeviceDescriptor | None = None

    @classmethod
    def qualified(cls, descriptor: DeviceDescriptor) -> QualificationVerdict:
        return cls(VerdictStatus.QUALIFIED, descriptor=descriptor)

    @classmethod
    def incompatible(cls, reason: str) -> QualificationVerdict:
        return cls(VerdictStatus.INCOMPATIBLE, reason=reason)

    @classmethod
    def name_mismatch(cls, reason: str = "") -> QualificationVerdict:
        return cls(VerdictStatus.NAME_MISMATCH, reason=reason)

    @property
    def is_qualified(self) -> bool:
        return self.status is VerdictStatus.QUALIFIED
