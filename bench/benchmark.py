"""Simple benchmarking harness for asynclog.

Measures producer-side latency (time spent inside submit) and end-to-end
throughput (lines/sec until the worker drained) with approximate memory
growth. The sink only counts lines so the numbers reflect queue + formatting
cost, not terminal speed. For deeper profiling use py-spy or scalene.
"""
from __future__ import annotations

import argparse
import json
import threading
import time
import tracemalloc
from typing import Any, Dict, List, Sequence

from asynclog import AsyncLogEngine
from asynclog.sinks import CountingSink

# (template, values) shapes roughly matching application logging
_SHAPES: Sequence[Sequence[Any]] = [
    ("user {} login success", 123),
    ("db connection slow latency={}ms host={}", 120.5, "db-primary"),
    ("payment declined code={} user={} amount={}", 402, 9912, 19.99),
    ("cache hit key={}", "abcd1234"),
    ("heartbeat",),
    ("{}", "x", "y", "z"),
]


def run(threads: int, per_thread: int, warm: int) -> Dict[str, Any]:
    # Warm phase: exercise the formatter once per shape (not timed)
    with AsyncLogEngine.create(sink=CountingSink()) as warm_engine:
        for i in range(warm):
            warm_engine.info(*_SHAPES[i % len(_SHAPES)])

    sink = CountingSink()
    engine = AsyncLogEngine.create(sink=sink)
    submit_times: List[float] = [0.0] * threads

    def _produce(idx: int) -> None:
        start = time.perf_counter()
        for seq in range(per_thread):
            engine.info(*_SHAPES[(idx + seq) % len(_SHAPES)])
        submit_times[idx] = time.perf_counter() - start

    tracemalloc.start()
    start = time.perf_counter()
    producers = [threading.Thread(target=_produce, args=(i,)) for i in range(threads)]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    engine.shutdown()
    elapsed = time.perf_counter() - start
    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    total = threads * per_thread
    return {
        "threads": threads,
        "messages": total,
        "lines": sink.count,
        "elapsed_s": elapsed,
        "lines_per_sec": sink.count / elapsed if elapsed else float("inf"),
        "submit_us_per_call": (max(submit_times) / per_thread * 1e6) if per_thread else 0.0,
        "current_mb": current / 1024 / 1024,
        "peak_mb": peak / 1024 / 1024,
    }


def main() -> int:
    ap = argparse.ArgumentParser(description="Benchmark asynclog throughput")
    ap.add_argument("--threads", type=int, default=4, help="Producer threads")
    ap.add_argument("--messages", type=int, default=25000, help="Messages per producer")
    ap.add_argument("--warm", type=int, default=2000, help="Warm-up messages (not timed)")
    ap.add_argument("--json", help="Write the result as JSON to this path")
    args = ap.parse_args()

    result = run(max(1, args.threads), max(0, args.messages), max(0, args.warm))
    print(
        f"Wrote {result['lines']}/{result['messages']} lines in {result['elapsed_s']:.3f}s "
        f"-> {result['lines_per_sec']:,.0f} lines/sec"
    )
    print(f"Slowest producer ~{result['submit_us_per_call']:.2f} us per submit")
    print(f"Current mem ~{result['current_mb']:.2f} MB; Peak mem ~{result['peak_mb']:.2f} MB")
    if args.json:
        with open(args.json, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2)
    return 0 if result["lines"] == result["messages"] else 1


if __name__ == "__main__":  # pragma: no cover - manual use
    raise SystemExit(main())
