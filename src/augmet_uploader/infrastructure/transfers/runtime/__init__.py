"""Runtime helpers shared by the transfer pipeline."""

from augmet_uploader.infrastructure.transfers.runtime.in_flight_call_slot import (
    InFlightCallCancelled,
    InFlightCallSlot,
)
from augmet_uploader.infrastructure.transfers.runtime.progress_bus import (
    ProgressBus,
    ProgressCallback,
    ProgressSubscription,
)
from augmet_uploader.infrastructure.transfers.runtime.transfer_queue import TransferQueue
from augmet_uploader.infrastructure.transfers.runtime.upload_session_store import (
    UploadSessionStore,
)

__all__ = [
    "InFlightCallCancelled",
    "InFlightCallSlot",
    "ProgressBus",
    "ProgressCallback",
    "ProgressSubscription",
    "TransferQueue",
    "UploadSessionStore",
]
