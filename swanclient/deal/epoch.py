"""Filecoin epoch and piece size arithmetic."""

from __future__ import annotations

import time

FILECOIN_GENESIS_UNIX = 1598306400  # mainnet genesis, 2020-08-24T22:00:00Z
EPOCH_DURATION_SECONDS = 30
EPOCH_PER_HOUR = 3600 // EPOCH_DURATION_SECONDS


def current_epoch(now: float | None = None) -> int:
    """Chain epoch at ``now`` (unix seconds), derived from the wall clock."""
    ts = time.time() if now is None else now
    return int((ts - FILECOIN_GENESIS_UNIX) // EPOCH_DURATION_SECONDS)


def start_epoch_after(hours: int, now: float | None = None) -> int:
    """Deal start epoch ``hours`` (plus one hour of slack) from now."""
    return current_epoch(now) + (hours + 1) * EPOCH_PER_HOUR


def calculate_piece_size(file_size: int) -> int:
    """
    Unpadded piece size for a CAR of ``file_size`` bytes.

    The padded size is the next power of two; the unpadded size is 254/256
    of it. When the file does not fit the unpadded size, the next power of
    two is used instead.
    """
    if file_size <= 0:
        raise ValueError(f"file size must be positive, got {file_size}")
    sector_size = 1 << (file_size - 1).bit_length()
    piece_size = sector_size * 254 // 256
    if file_size <= piece_size:
        return piece_size
    return sector_size * 2 * 254 // 256
