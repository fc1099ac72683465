import asyncio
from typing import Optional

from shared.exceptions import OperationCancelled


def raise_if_cancelled(cancel: Optional[asyncio.Event]) -> None:
    """
    Checkpoint between store calls. Task cancellation already interrupts an in-flight
    store call; the event lets callers stop an operation without owning its task.
    """
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("operation cancelled by caller")
