"""Lotus JSON-RPC client.

Each public method builds one positional RpcRequest, sends it through the
transport and unwraps the tagged result-or-error envelope. Public queries
(version, ask) go to the miner API without a token; account-scoped calls go
to the client API with the configured access token.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from swanclient.lotus.types import (
    Ask,
    AskResult,
    CalcCommPParams,
    Cid,
    CommPResult,
    DealInfo,
    DealInfoParams,
    DealStatusParams,
    FileRef,
    GenCarParams,
    ImportParams,
    ImportResult,
    NoParams,
    RpcEnvelope,
    RpcParams,
    RpcRequest,
    StartDealParams,
    TipSet,
    VersionInfo,
)
from swanclient.transport.http import HttpTransport
from swanclient.utils.exceptions import (
    DecodeFailure,
    EmptyResult,
    ProtocolError,
    SwanClientError,
    TransportFailure,
)

if TYPE_CHECKING:
    from loguru import Logger

    from swanclient.config.schema import LotusConfig

T = TypeVar("T")

LOTUS_VERSION = "Filecoin.Version"
LOTUS_MARKET_GET_ASK = "Filecoin.MarketGetAsk"
LOTUS_CLIENT_CALC_COMM_P = "Filecoin.ClientCalcCommP"
LOTUS_CLIENT_IMPORT = "Filecoin.ClientImport"
LOTUS_CLIENT_GEN_CAR = "Filecoin.ClientGenCar"
LOTUS_CLIENT_START_DEAL = "Filecoin.ClientStartDeal"
LOTUS_CHAIN_HEAD = "Filecoin.ChainHead"
LOTUS_CLIENT_GET_DEAL_INFO = "Filecoin.ClientGetDealInfo"
LOTUS_CLIENT_GET_DEAL_STATUS = "Filecoin.ClientGetDealStatus"


class LotusClient:
    """Speaks the Lotus JSON-RPC dialect for one client node and one miner node."""

    def __init__(
        self,
        api_url: str,
        access_token: str = "",
        miner_api_url: str = "",
        miner_access_token: str = "",
        *,
        transport: HttpTransport | None = None,
        log: Logger | None = None,
    ):
        """
        Args:
            api_url: Lotus client API (import, commP, gen-car, deal start)
            access_token: Token with write permission on the client API
            miner_api_url: Lotus miner API used for public queries; defaults to api_url
            miner_access_token: Token for the miner API
            transport: HTTP transport; a default one is created if omitted
            log: Logging sink; defaults to the loguru logger bound to this component
        """
        self.api_url = api_url
        self.access_token = access_token
        self.miner_api_url = miner_api_url or api_url
        self.miner_access_token = miner_access_token
        self._log = log or logger.bind(component="lotus")
        self.transport = transport or HttpTransport(log=self._log)

    @classmethod
    def from_config(cls, config: LotusConfig, **kwargs: Any) -> LotusClient:
        return cls(
            api_url=config.api_url,
            access_token=config.access_token,
            miner_api_url=config.miner_api_url,
            miner_access_token=config.miner_access_token,
            **kwargs,
        )

    def _fail(self, err: SwanClientError) -> SwanClientError:
        self._log.error(str(err))
        return err

    def _call(
        self,
        method: str,
        params: RpcParams,
        result_type: Any,
        *,
        target: str,
        public: bool = False,
        require_result: bool = True,
    ) -> Any:
        request = RpcRequest(method=method, params=params)
        if public:
            url, token = self.miner_api_url, None
        else:
            url, token = self.api_url, self.access_token

        response = self.transport.post(url, request.to_payload(), token=token)
        if not response:
            raise self._fail(TransportFailure(target, f"no response from {url}"))

        try:
            envelope = RpcEnvelope.model_validate_json(response)
        except ValidationError as exc:
            raise self._fail(DecodeFailure(target, f"invalid json-rpc envelope ({exc.error_count()} errors)")) from exc

        return self._unwrap(envelope, result_type, target=target, require_result=require_result)

    def _unwrap(self, envelope: RpcEnvelope, result_type: Any, *, target: str, require_result: bool) -> Any:
        if envelope.error is not None:
            raise self._fail(ProtocolError(target, envelope.error.message, remote_code=envelope.error.code))
        if envelope.result is None:
            if require_result:
                raise self._fail(EmptyResult(target))
            return None
        if result_type is None:
            return None
        try:
            return TypeAdapter(result_type).validate_python(envelope.result)
        except ValidationError as exc:
            raise self._fail(DecodeFailure(target, f"unexpected result shape ({exc.error_count()} errors)")) from exc

    def version(self) -> str:
        """Lotus daemon version string, e.g. "1.15.0+mainnet+git.0a2ab9b2"."""
        info: VersionInfo = self._call(LOTUS_VERSION, NoParams(), VersionInfo, target=LOTUS_VERSION, public=True)
        return info.version

    def market_get_ask(self) -> Ask:
        """Current storage ask of the miner behind miner_api_url."""
        result: AskResult = self._call(
            LOTUS_MARKET_GET_ASK, NoParams(), AskResult, target=LOTUS_MARKET_GET_ASK, public=True
        )
        return result.ask

    def comm_p(self, file_path: str) -> CommPResult:
        """Piece cid and unpadded piece size of a CAR file, both computed by the node."""
        return self._call(
            LOTUS_CLIENT_CALC_COMM_P,
            CalcCommPParams(file_path=file_path),
            CommPResult,
            target=f"{LOTUS_CLIENT_CALC_COMM_P} {file_path}",
        )

    def calc_comm_p(self, file_path: str) -> str:
        """Piece commitment (piece cid) of a CAR file."""
        return self.comm_p(file_path).root.cid

    def import_file(self, file_path: str, is_car: bool = False) -> str:
        """Import a local file into the client node and return its data cid."""
        result: ImportResult = self._call(
            LOTUS_CLIENT_IMPORT,
            ImportParams(ref=FileRef(path=file_path, is_car=is_car)),
            ImportResult,
            target=f"{LOTUS_CLIENT_IMPORT} {file_path}",
        )
        self._log.debug(f"imported {file_path} as {result.root.cid} (import id {result.import_id})")
        return result.root.cid

    def gen_car(self, src_file_path: str, dest_car_file_path: str, src_is_car: bool = False) -> None:
        """Generate a CAR archive of ``src_file_path`` at ``dest_car_file_path``."""
        self._call(
            LOTUS_CLIENT_GEN_CAR,
            GenCarParams(ref=FileRef(path=src_file_path, is_car=src_is_car), dest_path=dest_car_file_path),
            None,
            target=f"{LOTUS_CLIENT_GEN_CAR} {src_file_path}",
            require_result=False,
        )

    def start_deal(self, params: StartDealParams) -> str:
        """Propose a storage deal and return the proposal cid."""
        result: Cid = self._call(
            LOTUS_CLIENT_START_DEAL,
            params,
            Cid,
            target=f"{LOTUS_CLIENT_START_DEAL} {params.data_cid} -> {params.miner}",
        )
        self._log.info(f"deal proposed to {params.miner}, proposal cid: {result.cid}")
        return result.cid

    def chain_head(self) -> TipSet:
        return self._call(LOTUS_CHAIN_HEAD, NoParams(), TipSet, target=LOTUS_CHAIN_HEAD)

    def get_deal_info(self, proposal_cid: str) -> DealInfo:
        return self._call(
            LOTUS_CLIENT_GET_DEAL_INFO,
            DealInfoParams(proposal_cid=proposal_cid),
            DealInfo,
            target=f"{LOTUS_CLIENT_GET_DEAL_INFO} {proposal_cid}",
        )

    def get_deal_status(self, state: int) -> str:
        """Human readable name of a numeric storage deal state, e.g. 7 -> "StorageDealActive"."""
        return self._call(
            LOTUS_CLIENT_GET_DEAL_STATUS,
            DealStatusParams(state=state),
            str,
            target=f"{LOTUS_CLIENT_GET_DEAL_STATUS} {state}",
        )
