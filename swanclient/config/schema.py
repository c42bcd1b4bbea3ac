"""Configuration schema using Pydantic.

Single data model and defaults for swanclient, persisted to ~/.swanclient/config.json.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class LotusConfig(BaseModel):
    """Lotus node endpoints."""
    api_url: str = "http://127.0.0.1:1234/rpc/v0"
    access_token: str = ""  # Client API token with write permission (import, commP, deal start)
    miner_api_url: str = "http://127.0.0.1:2345/rpc/v0"
    miner_access_token: str = ""  # Public queries (version, ask) are sent without it


class SwanConfig(BaseModel):
    """Swan task service connection."""
    api_url: str = "https://api.filswan.com"
    api_key: str = ""
    access_token: str = ""


class SenderConfig(BaseModel):
    """Defaults applied to every deal proposal."""
    wallet: str = ""
    miner_fid: str = ""
    verified_deal: bool = False
    fast_retrieval: bool = True
    duration: int = 1512000  # Deal duration in epochs (~525 days)
    start_epoch_hours: int = 96
    epoch_price: str = "2"  # attoFIL per epoch, passed through to Lotus unchanged
    provider_collateral: str = "0"
    transfer_type: str = "graphsync"
    generate_car: bool = True
    output_dir: str = "/tmp/swanclient/car"


class HttpConfig(BaseModel):
    """Transport settings."""
    timeout: float = 30.0


class Config(BaseSettings):
    """Root configuration for swanclient."""
    lotus: LotusConfig = Field(default_factory=LotusConfig)
    swan: SwanConfig = Field(default_factory=SwanConfig)
    sender: SenderConfig = Field(default_factory=SenderConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)

    model_config = ConfigDict(
        env_prefix="SWANCLIENT_",
        env_nested_delimiter="__",
    )
