"""Lotus JSON-RPC adapter."""

from swanclient.lotus.client import LotusClient
from swanclient.lotus.types import (
    RAW_BLOCK_SIZE,
    Ask,
    CommPResult,
    DealInfo,
    ErrorDetail,
    FileRef,
    RpcEnvelope,
    RpcRequest,
    StartDealParams,
    TipSet,
    VersionInfo,
)

__all__ = [
    "LotusClient",
    "RAW_BLOCK_SIZE",
    "Ask",
    "CommPResult",
    "DealInfo",
    "ErrorDetail",
    "FileRef",
    "RpcEnvelope",
    "RpcRequest",
    "StartDealParams",
    "TipSet",
    "VersionInfo",
]
