import threading

import pytest

import asynclog
from asynclog.config import EngineConfig
from asynclog.engine import AsyncLogEngine, EngineStartError, get_engine, shutdown_engine
from asynclog.levels import Level
from asynclog.sinks import MemorySink
from asynclog.worker import WorkerState


@pytest.mark.timeout(10)
def test_level_entry_points_write_tagged_lines():
    sink = MemorySink()
    with AsyncLogEngine.create(sink=sink) as log:
        log.debug("d {}", 1)
        log.info("i {}", 2.5)
        log.warn("w")
        log.warning("w2")
        log.error("{} failed", "job")
        log.submit("info")
    assert sink.lines == [
        "[DEBUG]:d 1",
        "[INFOS]:i 2.5",
        "[WARNS]:w",
        "[WARNS]:w2",
        "[ERROR]:job failed",
        "[INFOS]:",
    ]
    assert sink.closed
    assert log.state is WorkerState.STOPPED


@pytest.mark.timeout(10)
def test_unsupported_template_produces_no_line():
    sink = MemorySink()
    with AsyncLogEngine.create(sink=sink) as log:
        log.info(None, "ignored")
        log.info("kept")
    assert sink.lines == ["[INFOS]:kept"]
    assert log.worker.dropped == 1


@pytest.mark.timeout(10)
def test_stop_then_join_drains_everything_pushed_before_stop():
    release = threading.Event()

    class GatedSink(MemorySink):
        def write_line(self, text):
            release.wait(5)
            super().write_line(text)

    sink = GatedSink()
    log = AsyncLogEngine.create(sink=sink)
    for i in range(50):
        log.info("msg {}", i)
    log.stop()
    log.stop()
    log.info("too late")
    release.set()
    assert log.join(timeout=5)
    assert sink.lines == [f"[INFOS]:msg {i}" for i in range(50)]
    assert log.submitted == 50
    assert log.rejected == 1
    assert log.shutdown()
    assert sink.closed


@pytest.mark.timeout(30)
def test_concurrent_producers_exact_line_count():
    sink = MemorySink()
    producers, per_producer = 8, 400
    log = AsyncLogEngine.create(sink=sink)

    def _produce(pid):
        for seq in range(per_producer):
            log.info("producer {} seq {}", pid, seq)

    threads = [threading.Thread(target=_produce, args=(p,)) for p in range(producers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert log.shutdown(timeout=20)
    lines = sink.lines
    assert len(lines) == producers * per_producer
    assert len(set(lines)) == len(lines)


@pytest.mark.timeout(30)
def test_output_follows_global_push_order():
    sink = MemorySink()
    log = AsyncLogEngine.create(sink=sink)
    order_lock = threading.Lock()
    pushed = []

    def _produce(pid):
        for seq in range(200):
            # Serialize submit + bookkeeping so `pushed` is the queue's order
            with order_lock:
                log.error("{}:{}", pid, seq)
                pushed.append(f"[ERROR]:{pid}:{seq}")

    threads = [threading.Thread(target=_produce, args=(p,)) for p in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert log.shutdown(timeout=20)
    assert sink.lines == pushed


@pytest.mark.timeout(10)
def test_shutdown_is_idempotent():
    sink = MemorySink()
    log = AsyncLogEngine.create(sink=sink)
    log.info("once")
    assert log.shutdown()
    assert log.shutdown()
    assert log.closed
    assert sink.lines == ["[INFOS]:once"]


@pytest.mark.timeout(10)
def test_shutdown_of_unstarted_engine_still_drains():
    sink = MemorySink()
    log = AsyncLogEngine(sink=sink)
    log.info("queued before start")
    assert log.shutdown(timeout=5)
    assert sink.lines == ["[INFOS]:queued before start"]


@pytest.mark.timeout(10)
def test_shutdown_timeout_keeps_sink_open():
    release = threading.Event()

    class BlockingSink(MemorySink):
        def write_line(self, text):
            release.wait(5)
            super().write_line(text)

    sink = BlockingSink()
    log = AsyncLogEngine.create(sink=sink)
    log.info("stuck")
    assert log.shutdown(timeout=0.05) is False
    assert not sink.closed
    release.set()
    assert log.shutdown(timeout=5) is True
    assert sink.closed
    assert sink.lines == ["[INFOS]:stuck"]


def test_worker_start_failure_is_surfaced(monkeypatch):
    def _refuse(self):
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(threading.Thread, "start", _refuse)
    with pytest.raises(EngineStartError, match="could not start worker thread"):
        AsyncLogEngine.create(sink=MemorySink())


def test_unknown_level_is_a_caller_error():
    log = AsyncLogEngine(sink=MemorySink())
    with pytest.raises(ValueError):
        log.submit("fatal", "x")


@pytest.mark.timeout(10)
def test_default_engine_lifecycle(tmp_path):
    out = tmp_path / "default.log"
    shutdown_engine()
    engine = get_engine(EngineConfig(sink="file", path=str(out)))
    try:
        assert get_engine() is engine
        asynclog.info("{} plus {} is {}", 1, 2, 3)
        asynclog.debug("d")
        asynclog.warn("w")
        asynclog.error("e")
    finally:
        shutdown_engine()
    assert engine.closed
    assert out.read_text(encoding="utf-8").splitlines() == [
        "[INFOS]:1 plus 2 is 3",
        "[DEBUG]:d",
        "[WARNS]:w",
        "[ERROR]:e",
    ]
    # A later call builds a fresh engine
    fresh = get_engine(EngineConfig(sink="file", path=str(tmp_path / "fresh.log")))
    try:
        assert fresh is not engine
    finally:
        shutdown_engine()


def test_level_enum_accepted_by_submit():
    sink = MemorySink()
    with AsyncLogEngine.create(sink=sink) as log:
        log.submit(Level.WARN, "{}", 3)
    assert sink.lines == ["[WARNS]:3"]


@pytest.mark.timeout(10)
def test_join_on_unstarted_engine_drains_queued_tasks():
    sink = MemorySink()
    log = AsyncLogEngine(sink=sink)
    log.info("first")
    log.warn("second")
    log.stop()
    assert log.join(timeout=5) is True
    assert log.state is WorkerState.STOPPED
    assert sink.lines == ["[INFOS]:first", "[WARNS]:second"]
    assert log.shutdown()
