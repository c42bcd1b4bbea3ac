"""Deal lifecycle coordination."""

from swanclient.deal.epoch import calculate_piece_size, current_epoch, start_epoch_after
from swanclient.deal.lifecycle import DealLifecycle
from swanclient.deal.types import (
    DEAL_STATUS_CREATED,
    DEAL_STATUS_WAITING,
    DealConfig,
    DealOutcome,
    FileDesc,
)

__all__ = [
    "DealLifecycle",
    "DealConfig",
    "DealOutcome",
    "FileDesc",
    "DEAL_STATUS_CREATED",
    "DEAL_STATUS_WAITING",
    "calculate_piece_size",
    "current_epoch",
    "start_epoch_after",
]
