"""Swan task service payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RESPONSE_STATUS_SUCCESS = "SUCCESS"
GET_OFFLINE_DEAL_LIMIT_DEFAULT = 50

TASK_TYPE_VERIFIED = "verified"
TASK_TYPE_REGULAR = "regular"


def is_success(status: str | None) -> bool:
    return (status or "").upper() == RESPONSE_STATUS_SUCCESS


class _SwanModel(BaseModel):
    """Swan sends null for unset fields; a null takes the field default."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class OfflineDeal(_SwanModel):
    """Deal record as stored by the task service; unknown fields are kept."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int
    miner_id: str = Field("", alias="miner_fid")
    status: str = ""
    data_cid: str = Field("", alias="payload_cid")
    piece_cid: str = ""
    piece_size: int | None = None
    start_epoch: int | None = None
    deal_cid: str = ""
    file_path: str = ""
    file_size: int | None = None
    file_source_url: str = ""
    note: str = ""
    task_id: int | None = None

    @field_validator("miner_id", mode="before")
    @classmethod
    def _miner_id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class OfflineDealsData(_SwanModel):
    # Validated one record at a time by SwanClient.get_offline_deals
    deal: list[Any] = Field(default_factory=list)


class OfflineDealsResponse(_SwanModel):
    status: str = ""
    data: OfflineDealsData = Field(default_factory=OfflineDealsData)


class UpdateOfflineDealData(_SwanModel):
    deal: Any = None
    message: str = ""


class UpdateOfflineDealResponse(_SwanModel):
    status: str = ""
    message: str = ""
    data: UpdateOfflineDealData = Field(default_factory=UpdateOfflineDealData)


class StatusResponse(_SwanModel):
    """Minimal shape shared by every Swan response."""
    model_config = ConfigDict(extra="allow")

    status: str = ""
    message: str = ""


@dataclass(frozen=True)
class SwanSession:
    """Credentials held for the lifetime of one SwanClient."""
    api_url: str
    api_key: str
    token: str


@dataclass
class Task:
    task_name: str
    curated_dataset: str = ""
    description: str = ""
    is_public: bool = True
    is_verified: bool = False
    miner_id: str | None = None

    def to_form(self) -> dict[str, str]:
        form = {
            "task_name": self.task_name,
            "curated_dataset": self.curated_dataset,
            "description": self.description,
            "is_public": "true" if self.is_public else "false",
            "type": TASK_TYPE_VERIFIED if self.is_verified else TASK_TYPE_REGULAR,
        }
        if self.miner_id is not None:
            form["miner_id"] = self.miner_id
        return form
