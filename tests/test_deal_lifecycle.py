import threading

import pytest

from swanclient.deal import DealConfig, DealLifecycle, FileDesc
from swanclient.deal.epoch import calculate_piece_size
from swanclient.lotus.types import Cid, CommPResult
from swanclient.utils.exceptions import ProtocolError, TransportFailure


class FakeLotus:
    def __init__(self, fail_on: str | None = None, fail_paths: tuple[str, ...] = (), comm_p_size: int = 0):
        self.calls: list[tuple] = []
        self.fail_on = fail_on
        self.fail_paths = fail_paths
        self.comm_p_size = comm_p_size
        self.started = []
        self._lock = threading.Lock()

    def _record(self, name: str, *args) -> None:
        with self._lock:
            self.calls.append((name, *args))
        if name == self.fail_on and (not self.fail_paths or args[0] in self.fail_paths):
            raise ProtocolError(f"Filecoin.{name} {args[0]}", "boom", remote_code=1)

    def import_file(self, path, is_car=False):
        self._record("import", path, is_car)
        return f"data-{path}"

    def gen_car(self, src, dest, src_is_car=False):
        self._record("gen_car", src, dest, src_is_car)

    def comm_p(self, path):
        self._record("commp", path)
        return CommPResult(root=Cid(cid=f"piece-{path}"), size=self.comm_p_size)

    def start_deal(self, params):
        self._record("start_deal", params.data_cid)
        with self._lock:
            self.started.append(params)
        return f"proposal-{params.data_cid}"


class FakeSwan:
    def __init__(self, accept: bool = True):
        self.accept = accept
        self.updates: list[tuple] = []

    def update_offline_deal_status(self, deal_id, status, *status_info):
        self.updates.append((deal_id, status, *status_info))
        return self.accept

    def get_offline_deals(self, miner_fid, status, limit=50):
        return [("deal", miner_fid, status, limit)]

    def update_task_by_uuid(self, task_uuid, miner_fid):
        return f"{task_uuid}:{miner_fid}"


def _config(**overrides) -> DealConfig:
    values = dict(sender_wallet="f3abc", miner_fid="f01000", output_dir="/car")
    values.update(overrides)
    return DealConfig(**values)


def _names(lotus: FakeLotus) -> list[str]:
    return [c[0] for c in lotus.calls]


def test_full_sequence_runs_in_order_and_reports_status(log) -> None:
    lotus, swan = FakeLotus(), FakeSwan()
    lifecycle = DealLifecycle(lotus, swan, log=log)

    outcome = lifecycle.propose_deal(
        FileDesc(source_file_path="/data/a.bin", car_file_size=1024, start_epoch=500000, deal_id=42),
        _config(),
    )

    assert _names(lotus) == ["import", "gen_car", "commp", "start_deal"]
    assert lotus.calls[1] == ("gen_car", "/data/a.bin", "/car/a.bin.car", False)
    assert lotus.calls[2] == ("commp", "/car/a.bin.car")
    assert swan.updates == [(42, "Waiting", "proposal-data-/data/a.bin")]
    assert outcome.ok
    assert outcome.piece_size == calculate_piece_size(1024) == 2032
    assert outcome.start_epoch == 500000


def test_start_deal_params_carry_known_values(log) -> None:
    lotus = FakeLotus()
    lifecycle = DealLifecycle(lotus, log=log)

    lifecycle.propose_deal(
        FileDesc(
            source_file_path="/data/a.car",
            is_car=True,
            data_cid="bafy1",
            piece_cid="bafy2",
            piece_size=1024,
            start_epoch=777,
        ),
        _config(verified_deal=True, epoch_price="5", duration=600000),
    )

    assert _names(lotus) == ["start_deal"]
    (params,) = lotus.started
    assert (params.data_cid, params.piece_cid, params.piece_size) == ("bafy1", "bafy2", 1024)
    assert (params.miner, params.wallet) == ("f01000", "f3abc")
    assert params.verified_deal is True
    assert params.epoch_price == "5"
    assert params.min_blocks_duration == 600000
    assert params.deal_start_epoch == 777
    assert params.to_wire()["Data"]["RawBlockSize"] == 42


def test_car_source_skips_gen_car(log) -> None:
    lotus = FakeLotus()

    DealLifecycle(lotus, log=log).propose_deal(
        FileDesc(source_file_path="/data/a.car", is_car=True, car_file_size=4000), _config()
    )

    assert _names(lotus) == ["import", "commp", "start_deal"]
    assert lotus.calls[0] == ("import", "/data/a.car", True)
    assert lotus.calls[1] == ("commp", "/data/a.car")


def test_generate_car_disabled_uses_source(log) -> None:
    lotus = FakeLotus()

    DealLifecycle(lotus, log=log).propose_deal(
        FileDesc(source_file_path="/data/a.bin", car_file_size=10), _config(generate_car=False)
    )

    assert "gen_car" not in _names(lotus)
    assert ("commp", "/data/a.bin") in lotus.calls


def test_known_data_cid_skips_import(log) -> None:
    lotus = FakeLotus()

    outcome = DealLifecycle(lotus, log=log).propose_deal(
        FileDesc(source_file_path="/data/a.bin", data_cid="bafyknown", car_file_size=10), _config()
    )

    assert "import" not in _names(lotus)
    assert outcome.data_cid == "bafyknown"


def test_comm_p_failure_halts_sequence(log) -> None:
    lotus, swan = FakeLotus(fail_on="commp"), FakeSwan()

    with pytest.raises(ProtocolError):
        DealLifecycle(lotus, swan, log=log).propose_deal(
            FileDesc(source_file_path="/data/a.bin", car_file_size=10, deal_id=1), _config()
        )

    assert _names(lotus) == ["import", "gen_car", "commp"]
    assert swan.updates == []


def test_rejected_status_update_raises(log) -> None:
    lifecycle = DealLifecycle(FakeLotus(), FakeSwan(accept=False), log=log)

    with pytest.raises(ProtocolError) as err:
        lifecycle.propose_deal(FileDesc(source_file_path="/data/a.bin", car_file_size=10, deal_id=9), _config())

    assert "update deal 9" in err.value.message
    assert log.messages()


def test_deal_id_without_swan_fails_before_any_call(log) -> None:
    lotus = FakeLotus()

    with pytest.raises(ValueError):
        DealLifecycle(lotus, log=log).propose_deal(FileDesc(source_file_path="/data/a.bin", deal_id=3), _config())

    assert lotus.calls == []


def test_piece_size_from_file_on_disk(tmp_path, log) -> None:
    car = tmp_path / "a.car"
    car.write_bytes(b"x" * 3000)

    outcome = DealLifecycle(FakeLotus(), log=log).propose_deal(
        FileDesc(source_file_path=str(car), is_car=True), _config()
    )

    assert outcome.piece_size == calculate_piece_size(3000)


def test_piece_size_reported_by_node_needs_no_local_car(log) -> None:
    lotus = FakeLotus(comm_p_size=8323072)

    outcome = DealLifecycle(lotus, log=log).propose_deal(
        FileDesc(source_file_path="/node/only/a.bin", start_epoch=500000), _config(output_dir="/node/car")
    )

    assert _names(lotus) == ["import", "gen_car", "commp", "start_deal"]
    assert outcome.piece_size == 8323072
    assert lotus.started[0].piece_size == 8323072
    assert outcome.piece_cid == "piece-/node/car/a.bin.car"


def test_known_piece_size_wins_over_node_size(log) -> None:
    lotus = FakeLotus(comm_p_size=8323072)

    outcome = DealLifecycle(lotus, log=log).propose_deal(
        FileDesc(source_file_path="/node/a.bin", piece_size=2032), _config()
    )

    assert outcome.piece_size == 2032


def test_missing_car_file_is_value_error(tmp_path, log) -> None:
    with pytest.raises(ValueError):
        DealLifecycle(FakeLotus(), log=log).propose_deal(
            FileDesc(source_file_path=str(tmp_path / "gone.car"), is_car=True), _config()
        )


def test_default_start_epoch_is_in_the_future(monkeypatch, log) -> None:
    monkeypatch.setattr("swanclient.deal.lifecycle.start_epoch_after", lambda hours: 1000 + hours)

    outcome = DealLifecycle(FakeLotus(), log=log).propose_deal(
        FileDesc(source_file_path="/data/a.bin", car_file_size=10), _config(start_epoch_hours=48)
    )

    assert outcome.start_epoch == 1048


def test_propose_deals_isolates_failures_and_keeps_order(log) -> None:
    lotus = FakeLotus(fail_on="import", fail_paths=("/data/bad.bin",))
    lifecycle = DealLifecycle(lotus, log=log)
    descs = [
        FileDesc(source_file_path="/data/a.bin", car_file_size=10),
        FileDesc(source_file_path="/data/bad.bin", car_file_size=10),
        FileDesc(source_file_path="/data/c.bin", car_file_size=10),
    ]

    outcomes = lifecycle.propose_deals(descs, _config(), max_workers=3)

    assert [o.source_file_path for o in outcomes] == ["/data/a.bin", "/data/bad.bin", "/data/c.bin"]
    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[1].error_code == "PROTOCOL_ERROR"
    assert "boom" in outcomes[1].error
    assert len(lotus.started) == 2


def test_propose_deals_records_transport_failures(log) -> None:
    class DownLotus(FakeLotus):
        def import_file(self, path, is_car=False):
            raise TransportFailure(f"Filecoin.ClientImport {path}", "no response from http://node")

    outcomes = DealLifecycle(DownLotus(), log=log).propose_deals(
        [FileDesc(source_file_path="/data/a.bin")], _config()
    )

    assert outcomes[0].error_code == "TRANSPORT_FAILURE"
    assert any("/data/a.bin" in m for m in log.messages())


def test_swan_passthroughs(log) -> None:
    lifecycle = DealLifecycle(FakeLotus(), FakeSwan(), log=log)

    assert lifecycle.deals_for_miner("f01000", "Created", 5) == [("deal", "f01000", "Created", 5)]
    assert lifecycle.reassign_task("uuid-1", "f01000") == "uuid-1:f01000"


def test_swan_passthroughs_need_swan(log) -> None:
    with pytest.raises(ValueError):
        DealLifecycle(FakeLotus(), log=log).deals_for_miner("f01000", "Created")
