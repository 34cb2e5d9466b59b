from __future__ import annotations

from enum import Enum


class VerdictStatus(Enum):
    """Outcome of qualifying one candidate peripheral."""
    QUALIFIED = "qualified"
    INCOMPATIBLE = "incompatible"
    NAME_MISMATCH = "name_mismatch"


class TransferState(Enum):
    """States of the watch face transfer state machine.

    IDLE -> NEGOTIATING -> SERVING -> COMPLETING -> DONE, with ABORTED
    reachable from any non-terminal state.
    """
    IDLE = "idle"
    NEGOTIATING = "negotiating"
    SERVING = "serving"
    COMPLETING = "completing"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.DONE, TransferState.ABORTED)
