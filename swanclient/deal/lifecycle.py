"""
Deal lifecycle coordinator.

Sequences Lotus and Swan calls into one storage deal:

1. import (or reuse) the data cid
2. optionally generate the CAR archive
3. compute (or reuse) the piece cid and piece size
4. build StartDealParams and propose the deal
5. report the proposal back to the task service

The coordinator keeps no state of its own; Swan is the system of record.
A failing step raises and nothing after it runs. Earlier steps are not rolled
back.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from loguru import logger

from swanclient.deal.epoch import calculate_piece_size, start_epoch_after
from swanclient.deal.types import DealConfig, DealOutcome, FileDesc
from swanclient.lotus.types import StartDealParams
from swanclient.utils.exceptions import ProtocolError, classify_exception, sanitize_error_message

if TYPE_CHECKING:
    from loguru import Logger

    from swanclient.lotus.client import LotusClient
    from swanclient.swan.client import SwanClient
    from swanclient.swan.types import OfflineDeal


class DealLifecycle:
    """Drive deals through Lotus and keep their Swan status in step."""

    def __init__(
        self,
        lotus: LotusClient,
        swan: SwanClient | None = None,
        *,
        log: Logger | None = None,
    ):
        self.lotus = lotus
        self.swan = swan
        self._log = log or logger.bind(component="deal")

    def _require_swan(self) -> SwanClient:
        if self.swan is None:
            raise ValueError("a Swan client is required for task service operations")
        return self.swan

    @staticmethod
    def _car_path(file_desc: FileDesc, config: DealConfig) -> str:
        if file_desc.car_file_path:
            return file_desc.car_file_path
        if file_desc.is_car:
            return file_desc.source_file_path
        if config.generate_car:
            return str(Path(config.output_dir) / f"{Path(file_desc.source_file_path).name}.car")
        return file_desc.source_file_path

    def _piece_size(self, file_desc: FileDesc, car_path: str) -> int:
        # Fallback when the node reported no size; needs car_path on this host
        size = file_desc.car_file_size
        if not size:
            try:
                size = os.path.getsize(car_path)
            except OSError as exc:
                raise ValueError(f"cannot size {car_path} for piece size: {exc}") from exc
        return calculate_piece_size(size)

    def propose_deal(self, file_desc: FileDesc, config: DealConfig) -> DealOutcome:
        """Run the full proposal sequence for one file. Raises on the first failing step."""
        if file_desc.deal_id is not None:
            self._require_swan()

        source = file_desc.source_file_path
        car_path = self._car_path(file_desc, config)

        data_cid = file_desc.data_cid
        if not data_cid:
            data_cid = self.lotus.import_file(source, file_desc.is_car)
            self._log.info(f"{source} imported, data cid: {data_cid}")

        if config.generate_car and not file_desc.is_car and car_path != source:
            self.lotus.gen_car(source, car_path, False)
            self._log.info(f"car generated for {source} at {car_path}")

        piece_cid = file_desc.piece_cid
        piece_size = file_desc.piece_size
        if not piece_cid:
            comm_p = self.lotus.comm_p(car_path)
            piece_cid = comm_p.root.cid
            piece_size = piece_size or comm_p.size or None
            self._log.info(f"{car_path} piece cid: {piece_cid}, piece size: {piece_size}")
        if not piece_size:
            piece_size = self._piece_size(file_desc, car_path)

        start_epoch = file_desc.start_epoch
        if start_epoch is None:
            start_epoch = start_epoch_after(config.start_epoch_hours)

        params = StartDealParams(
            data_cid=data_cid,
            piece_cid=piece_cid,
            piece_size=piece_size,
            wallet=config.sender_wallet,
            miner=config.miner_fid,
            epoch_price=config.epoch_price,
            min_blocks_duration=config.duration,
            deal_start_epoch=start_epoch,
            provider_collateral=config.provider_collateral,
            fast_retrieval=config.fast_retrieval,
            verified_deal=config.verified_deal,
            transfer_type=config.transfer_type,
        )
        proposal_cid = self.lotus.start_deal(params)

        if file_desc.deal_id is not None:
            swan = self._require_swan()
            if not swan.update_offline_deal_status(file_desc.deal_id, config.sent_status, proposal_cid):
                err = ProtocolError(
                    f"update deal {file_desc.deal_id}",
                    f"task service rejected status {config.sent_status} for proposal {proposal_cid}",
                )
                self._log.error(str(err))
                raise err

        return DealOutcome(
            source_file_path=source,
            deal_id=file_desc.deal_id,
            data_cid=data_cid,
            piece_cid=piece_cid,
            piece_size=piece_size,
            start_epoch=start_epoch,
            proposal_cid=proposal_cid,
        )

    def propose_deals(
        self,
        file_descs: Iterable[FileDesc],
        config: DealConfig,
        max_workers: int = 4,
    ) -> list[DealOutcome]:
        """
        Propose independent deals concurrently.

        A failure is recorded on that deal's outcome and does not stop the
        others. Outcomes are returned in input order.
        """
        items = list(file_descs)
        outcomes: list[DealOutcome] = []
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            futures = [pool.submit(self.propose_deal, fd, config) for fd in items]
            for fd, future in zip(items, futures):
                try:
                    outcomes.append(future.result())
                except Exception as exc:
                    code, _, _ = classify_exception(exc)
                    message = sanitize_error_message(str(exc))
                    self._log.error(f"deal for {fd.source_file_path} failed [{code}]: {message}")
                    outcomes.append(
                        DealOutcome(
                            source_file_path=fd.source_file_path,
                            deal_id=fd.deal_id,
                            error=message,
                            error_code=code,
                        )
                    )
        return outcomes

    def deals_for_miner(self, miner_fid: str, status: str, limit: int = 50) -> list[OfflineDeal]:
        return self._require_swan().get_offline_deals(miner_fid, status, limit)

    def reassign_task(self, task_uuid: str, miner_fid: str) -> str:
        return self._require_swan().update_task_by_uuid(task_uuid, miner_fid)
