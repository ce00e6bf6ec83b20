import pytest

from src.agents.node import MessageBuffer
from src.config.simulation_config import InstrumentationConfig
from src.instrumentation.errors import InstrumentationError
from src.instrumentation.observer import NodeInstrumentation

from helpers import ManualClock, make_message, read_rows


def test_init_creates_log_with_header(instrumentation, inst_config):
    assert instrumentation.log_path == inst_config.log_path_for(1)
    assert instrumentation.log_path.name == "node_1.csv"
    assert read_rows(instrumentation.log_path) == []
    assert instrumentation.windows.window_start == 0.0


def test_window_starts_at_init_time(inst_config):
    clock = ManualClock(450.0)
    inst = NodeInstrumentation(clock, inst_config)
    inst.on_init(2, MessageBuffer(capacity=100))

    inst.on_link_changed(5, True)
    clock.now = 750.0
    inst.on_tick()

    rows = read_rows(inst.log_path)
    assert [(r["window_start"], r["window_end"]) for r in rows] == [("450", "750")]


def test_reinit_does_not_duplicate_header(clock, inst_config):
    first = NodeInstrumentation(clock, inst_config)
    first.on_init(1, MessageBuffer(capacity=100))
    first.on_link_changed(2, True)
    clock.now = 300.0
    first.on_tick()

    second = NodeInstrumentation(clock, inst_config)
    second.on_init(1, MessageBuffer(capacity=100))

    lines = second.log_path.read_text(encoding="utf-8").splitlines()
    assert sum(1 for line in lines if line.startswith("observer,")) == 1
    assert len(lines) == 2


def test_unwritable_log_dir_is_fatal(tmp_path, clock):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    inst = NodeInstrumentation(clock, InstrumentationConfig(log_dir=str(blocker / "logs")))

    with pytest.raises(InstrumentationError):
        inst.on_init(1, MessageBuffer(capacity=100))


def test_hooks_before_init_raise(clock, inst_config):
    inst = NodeInstrumentation(clock, inst_config)
    with pytest.raises(InstrumentationError):
        inst.on_tick()


def test_link_up_down_same_time(instrumentation, clock):
    clock.now = 120.0
    instrumentation.on_link_changed(4, True)
    instrumentation.on_link_changed(4, False)
    clock.now = 300.0
    instrumentation.on_tick()

    row = read_rows(instrumentation.log_path)[0]
    assert (row["neighbor"], row["contacts"], row["contact_time"]) == ("4", "1", "0")


def test_transfer_counters_by_class(instrumentation, clock):
    instrumentation.on_transfer_start(2, "M1")
    instrumentation.on_transfer_complete(2, "M1")
    instrumentation.on_transfer_start(2, "F1")
    instrumentation.on_transfer_abort(2, "F1")
    instrumentation.on_transfer_start(2, "Q7")
    instrumentation.on_transfer_complete(2, None)
    instrumentation.on_message_received("F9", 3)
    instrumentation.on_message_received("Z1", 6)

    clock.now = 300.0
    instrumentation.on_tick()

    rows = {r["neighbor"]: r for r in read_rows(instrumentation.log_path)}
    assert set(rows) == {"2", "3"}
    assert (rows["2"]["tx_offer_normal"], rows["2"]["tx_ok_normal"]) == ("1", "1")
    assert (rows["2"]["tx_offer_flood"], rows["2"]["tx_abort_flood"], rows["2"]["tx_ok_flood"]) == ("1", "1", "0")
    assert rows["3"]["rx_flood"] == "1"
    assert rows["3"]["rx_normal"] == "0"


def test_drops_counted_only_when_dropped(instrumentation, clock):
    instrumentation.on_link_changed(2, True)
    instrumentation.on_message_deleted("M1", True)
    instrumentation.on_message_deleted("F1", True)
    instrumentation.on_message_deleted("F2", True)
    instrumentation.on_message_deleted("M3", False)
    instrumentation.on_message_deleted("X1", True)

    clock.now = 300.0
    instrumentation.on_tick()

    row = read_rows(instrumentation.log_path)[0]
    assert (row["drop_buf_normal"], row["drop_buf_flood"]) == ("1", "2")


def test_tick_samples_buffer_before_flushing(clock, inst_config):
    buffer = MessageBuffer(capacity=1000)
    inst = NodeInstrumentation(clock, inst_config)
    inst.on_init(1, buffer)
    inst.on_link_changed(2, True)

    for now, size in ((100.0, 10), (200.0, 10), (300.0, 10)):
        buffer.add(make_message(f"M{now:.0f}", size))
        clock.now = now
        inst.on_tick()

    row = read_rows(inst.log_path)[0]
    assert (row["buf_bytes_avg"], row["buf_bytes_max"]) == ("20.00", "30")


def test_unbounded_buffer_sampling(clock, inst_config):
    buffer = MessageBuffer(capacity=None)
    buffer.add(make_message("M1", 400))
    buffer.add(make_message("F1", 600))
    inst = NodeInstrumentation(clock, inst_config)
    inst.on_init(1, buffer)
    inst.on_link_changed(2, True)

    clock.now = 300.0
    inst.on_tick()

    row = read_rows(inst.log_path)[0]
    assert (row["buf_bytes_avg"], row["buf_bytes_max"]) == ("1000.00", "1000")


def test_replicate_has_independent_state(instrumentation, clock):
    instrumentation.on_link_changed(2, True)
    replica = instrumentation.replicate()

    assert replica.config is instrumentation.config
    assert replica.clock is instrumentation.clock
    assert replica.stats is not instrumentation.stats
    assert replica.contacts is not instrumentation.contacts
    assert replica.sampler is not instrumentation.sampler
    assert replica.writer is None
    assert len(replica.stats) == 0

    replica.on_init(2, MessageBuffer(capacity=100))
    assert replica.log_path != instrumentation.log_path
    assert len(instrumentation.stats) == 1


def test_link_up_after_elapsed_windows_never_negative(clock, inst_config):
    inst = NodeInstrumentation(clock, inst_config)
    inst.on_init(1, MessageBuffer(capacity=100))

    clock.now = 1000.0
    inst.on_link_changed(2, True)
    inst.on_tick()

    rows = read_rows(inst.log_path)
    assert all(float(r["contact_time"]) >= 0 for r in rows)
    assert [(r["window_start"], r["neighbor"], r["contact_time"]) for r in rows] == [("0", "2", "0")]
    assert inst.contacts.open_contacts() == {2: 1000.0}


def test_unclassified_traffic_produces_no_row(instrumentation, clock):
    instrumentation.on_transfer_start(7, "Q1")
    instrumentation.on_transfer_complete(7, "Q1")
    instrumentation.on_transfer_start(7, "Q2")
    instrumentation.on_transfer_abort(7, "Q2")
    instrumentation.on_message_received("Z3", 7)

    clock.now = 300.0
    instrumentation.on_tick()

    assert read_rows(instrumentation.log_path) == []
