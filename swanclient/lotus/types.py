"""
Lotus JSON-RPC wire types.

Requests are built from one frozen parameter object per method; each knows
the exact positional order Lotus expects. Responses are decoded with pydantic
into an envelope whose ``result`` is validated separately, so a populated
``error`` always wins over whatever ``result`` holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

LOTUS_JSON_RPC_ID = 7878
LOTUS_JSON_RPC_VERSION = "2.0"

RAW_BLOCK_SIZE = 42


def cid_wire(cid: str) -> dict[str, str]:
    """Encode a content identifier the way Lotus expects it."""
    return {"/": cid}


class RpcParams(Protocol):
    def positional(self) -> list[Any]: ...


@dataclass(frozen=True)
class NoParams:
    def positional(self) -> list[Any]:
        return []


@dataclass(frozen=True)
class FileRef:
    """Lotus FileRef: a local path and whether it already is a CAR."""
    path: str
    is_car: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {"Path": self.path, "IsCAR": self.is_car}


@dataclass(frozen=True)
class CalcCommPParams:
    file_path: str

    def positional(self) -> list[Any]:
        return [self.file_path]


@dataclass(frozen=True)
class ImportParams:
    ref: FileRef

    def positional(self) -> list[Any]:
        return [self.ref.to_wire()]


@dataclass(frozen=True)
class GenCarParams:
    ref: FileRef
    dest_path: str

    def positional(self) -> list[Any]:
        return [self.ref.to_wire(), self.dest_path]


@dataclass(frozen=True)
class StartDealParams:
    """Arguments of Filecoin.ClientStartDeal. Built once per proposal, never mutated."""
    data_cid: str
    piece_cid: str
    piece_size: int
    wallet: str
    miner: str
    epoch_price: str
    min_blocks_duration: int
    deal_start_epoch: int
    provider_collateral: str = "0"
    fast_retrieval: bool = True
    verified_deal: bool = False
    transfer_type: str = "graphsync"
    raw_block_size: int = RAW_BLOCK_SIZE

    def to_wire(self) -> dict[str, Any]:
        return {
            "Data": {
                "TransferType": self.transfer_type,
                "Root": cid_wire(self.data_cid),
                "PieceCid": cid_wire(self.piece_cid),
                "PieceSize": self.piece_size,
                "RawBlockSize": self.raw_block_size,
            },
            "Wallet": self.wallet,
            "Miner": self.miner,
            "EpochPrice": self.epoch_price,
            "MinBlocksDuration": self.min_blocks_duration,
            "ProviderCollateral": self.provider_collateral,
            "DealStartEpoch": self.deal_start_epoch,
            "FastRetrieval": self.fast_retrieval,
            "VerifiedDeal": self.verified_deal,
        }

    def positional(self) -> list[Any]:
        return [self.to_wire()]


@dataclass(frozen=True)
class DealInfoParams:
    proposal_cid: str

    def positional(self) -> list[Any]:
        return [cid_wire(self.proposal_cid)]


@dataclass(frozen=True)
class DealStatusParams:
    state: int

    def positional(self) -> list[Any]:
        return [self.state]


@dataclass(frozen=True)
class RpcRequest:
    method: str
    params: RpcParams
    id: int = LOTUS_JSON_RPC_ID
    jsonrpc: str = LOTUS_JSON_RPC_VERSION

    def to_payload(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params.positional(),
            "id": self.id,
        }


class _LotusModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Cid(_LotusModel):
    cid: str = Field(alias="/")


class ErrorDetail(_LotusModel):
    code: int
    message: str = ""


class RpcEnvelope(_LotusModel):
    id: int | str | None = None
    jsonrpc: str = ""
    error: ErrorDetail | None = None
    result: Any = None


class CommPResult(_LotusModel):
    root: Cid = Field(alias="Root")
    size: int = Field(0, alias="Size")


class ImportResult(_LotusModel):
    root: Cid = Field(alias="Root")
    import_id: int = Field(0, alias="ImportID")


class VersionInfo(_LotusModel):
    version: str = Field(alias="Version")
    api_version: int = Field(0, alias="APIVersion")
    block_delay: int = Field(0, alias="BlockDelay")


class Ask(_LotusModel):
    """Snapshot of a miner's storage ask."""
    price: str = Field(alias="Price")
    verified_price: str = Field("0", alias="VerifiedPrice")
    min_piece_size: int = Field(0, alias="MinPieceSize")
    max_piece_size: int = Field(0, alias="MaxPieceSize")
    miner: str = Field("", alias="Miner")
    timestamp: int = Field(0, alias="Timestamp")
    expiry: int = Field(0, alias="Expiry")
    seq_no: int = Field(0, alias="SeqNo")


class AskResult(_LotusModel):
    ask: Ask = Field(alias="Ask")


class TipSet(_LotusModel):
    cids: list[Cid] = Field(default_factory=list, alias="Cids")
    height: int = Field(0, alias="Height")


class DealInfo(_LotusModel):
    proposal_cid: Cid = Field(alias="ProposalCid")
    state: int = Field(0, alias="State")
    message: str = Field("", alias="Message")
    provider: str = Field("", alias="Provider")
    piece_cid: Cid | None = Field(None, alias="PieceCID")
    size: int = Field(0, alias="Size")
    price_per_epoch: str = Field("0", alias="PricePerEpoch")
    duration: int = Field(0, alias="Duration")
    deal_id: int = Field(0, alias="DealID")
