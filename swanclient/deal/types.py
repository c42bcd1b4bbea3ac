"""Inputs and outputs of the deal lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from swanclient.config.schema import SenderConfig

DEAL_STATUS_CREATED = "Created"
DEAL_STATUS_WAITING = "Waiting"


@dataclass
class FileDesc:
    """One local artifact to be dealt. Known cids/sizes skip the matching Lotus call."""
    source_file_path: str
    car_file_path: str = ""
    is_car: bool = False
    car_file_size: int | None = None
    data_cid: str = ""
    piece_cid: str = ""
    piece_size: int | None = None
    start_epoch: int | None = None
    deal_id: int | None = None


@dataclass(frozen=True)
class DealConfig:
    sender_wallet: str
    miner_fid: str
    verified_deal: bool = False
    fast_retrieval: bool = True
    duration: int = 1512000
    start_epoch_hours: int = 96
    epoch_price: str = "2"
    provider_collateral: str = "0"
    transfer_type: str = "graphsync"
    generate_car: bool = True
    output_dir: str = "/tmp/swanclient/car"
    sent_status: str = DEAL_STATUS_WAITING

    @classmethod
    def from_config(cls, config: SenderConfig, **overrides: object) -> DealConfig:
        values = {
            "sender_wallet": config.wallet,
            "miner_fid": config.miner_fid,
            "verified_deal": config.verified_deal,
            "fast_retrieval": config.fast_retrieval,
            "duration": config.duration,
            "start_epoch_hours": config.start_epoch_hours,
            "epoch_price": config.epoch_price,
            "provider_collateral": config.provider_collateral,
            "transfer_type": config.transfer_type,
            "generate_car": config.generate_car,
            "output_dir": config.output_dir,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class DealOutcome:
    source_file_path: str
    deal_id: int | None = None
    data_cid: str = ""
    piece_cid: str = ""
    piece_size: int | None = None
    start_epoch: int | None = None
    proposal_cid: str = ""
    error: str | None = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.proposal_cid)
