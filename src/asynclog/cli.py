import argparse
import json
import sys
import threading
import time
from typing import Any, Iterable, List, Optional, Tuple

from . import __version__
from .config import EngineConfig, SINK_CHOICES
from .engine import AsyncLogEngine
from .levels import Level
from .metrics import engine_metrics
from .sinks import CountingSink


def _print_summary(engine: AsyncLogEngine, force: bool = False) -> None:
    """Emit delivery counters to stderr.

    Only printed when something was lost (dropped, rejected, failed) unless
    force=True, so clean runs keep stderr empty.
    """
    worker = engine.worker
    lost = engine.rejected + worker.dropped + worker.format_errors + worker.sink_errors
    if lost or force:
        print(
            f"[asynclog] summary: submitted={engine.submitted} written={worker.written} "
            f"dropped={worker.dropped} rejected={engine.rejected} "
            f"format_errors={worker.format_errors} sink_errors={worker.sink_errors}",
            file=sys.stderr,
            flush=True,
        )


def build_config(args: argparse.Namespace) -> EngineConfig:
    cfg = EngineConfig()
    sink = getattr(args, "sink", None) or "stdout"
    path = getattr(args, "path", None)
    if sink == "file" and not path:
        print("[asynclog] --sink file requires --path; using stdout", file=sys.stderr)
        sink = "stdout"
    cfg.sink = sink
    cfg.path = path
    cfg.color = not bool(getattr(args, "no_color", False))
    if getattr(args, "join_timeout", None) is not None:
        if args.join_timeout <= 0:
            print("[asynclog] invalid --join-timeout; waiting without limit", file=sys.stderr)
        else:
            cfg.join_timeout = args.join_timeout
    return cfg


def _create_engine(args: argparse.Namespace) -> Optional[AsyncLogEngine]:
    cfg = build_config(args)
    try:
        return AsyncLogEngine.create(config=cfg)
    except OSError as exc:
        print(f"[asynclog] cannot open {cfg.path}: {exc.strerror or exc}", file=sys.stderr)
        return None


def _finish(engine: AsyncLogEngine, args: argparse.Namespace) -> int:
    drained = engine.shutdown()
    _print_summary(engine, force=not drained)
    metrics_path = getattr(args, "metrics_json", None)
    if metrics_path:
        try:
            with open(metrics_path, "w", encoding="utf-8") as fh:
                json.dump(engine_metrics(engine), fh, indent=2)
        except OSError as exc:
            print(f"[asynclog] cannot write metrics to {metrics_path}: {exc.strerror or exc}", file=sys.stderr)
            return 2
    return 0 if drained else 1


def coerce_value(raw: str) -> Any:
    """Command-line values become int, then float, then stay text."""
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def _parse_level(name: str) -> Optional[Level]:
    try:
        return Level.parse(name)
    except ValueError as exc:
        print(f"[asynclog] {exc}", file=sys.stderr)
        return None


def cmd_emit(args: argparse.Namespace) -> int:
    level = _parse_level(args.level)
    if level is None:
        return 2
    values: List[Any] = [args.template]
    values.extend(args.values if args.raw else [coerce_value(v) for v in args.values])
    engine = _create_engine(args)
    if engine is None:
        return 2
    engine.submit(level, *values)
    return _finish(engine, args)


def _iter_records(lines: Iterable[str]) -> Iterable[Tuple[Level, List[Any]]]:
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            print(f"[asynclog] line {lineno}: invalid JSON: {exc}", file=sys.stderr)
            continue
        if not isinstance(obj, dict):
            print(f"[asynclog] line {lineno}: expected an object", file=sys.stderr)
            continue
        level = _parse_level(str(obj.get("level", "info")))
        if level is None:
            continue
        values = obj.get("values", [])
        if not isinstance(values, list):
            values = [values]
        yield level, values


def cmd_replay(args: argparse.Namespace) -> int:
    if args.file == "-":
        records = list(_iter_records(sys.stdin))
    else:
        try:
            with open(args.file, "r", encoding="utf-8", errors="replace") as handle:
                records = list(_iter_records(handle))
        except FileNotFoundError:
            print(f"[asynclog] file not found: {args.file}", file=sys.stderr)
            return 2

    engine = _create_engine(args)
    if engine is None:
        return 2
    threads = max(1, args.threads)
    if threads == 1:
        for level, values in records:
            engine.submit(level, *values)
    else:
        # Round-robin split; order is kept per producer, not across them
        def _produce(chunk: List[Tuple[Level, List[Any]]]) -> None:
            for level, values in chunk:
                engine.submit(level, *values)

        producers = [
            threading.Thread(target=_produce, args=(records[i::threads],), name=f"producer-{i}")
            for i in range(threads)
        ]
        for t in producers:
            t.start()
        for t in producers:
            t.join()
    return _finish(engine, args)


def cmd_bench(args: argparse.Namespace) -> int:
    sink = CountingSink()
    engine = AsyncLogEngine.create(sink=sink, config=EngineConfig(thread_name="asynclog-bench"))
    threads = max(1, args.threads)
    per_thread = max(0, args.messages)

    def _produce(idx: int) -> None:
        for seq in range(per_thread):
            engine.info("producer {} seq {} latency {}ms", idx, seq, 0.25 * (seq % 8))

    start = time.perf_counter()
    producers = [threading.Thread(target=_produce, args=(i,)) for i in range(threads)]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    enqueued = time.perf_counter() - start
    engine.shutdown()
    elapsed = time.perf_counter() - start
    rate = sink.count / elapsed if elapsed > 0 else 0.0
    print(
        f"threads={threads} messages={threads * per_thread} lines={sink.count} "
        f"enqueue_s={enqueued:.3f} total_s={elapsed:.3f} lines_per_sec={rate:,.0f}"
    )
    return 0 if sink.count == threads * per_thread else 1


def _add_output_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--sink", choices=SINK_CHOICES, default="stdout", help="Where finished lines are written")
    p.add_argument("--path", help="Target file for --sink file (appended)")
    p.add_argument("--no-color", action="store_true", help="Disable colorized output for stream sinks")
    p.add_argument("--join-timeout", type=float, help="Seconds to wait for the worker to drain at exit")
    p.add_argument("--metrics-json", help="Write engine metrics as JSON to this path after shutdown")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asynclog", description="Asynchronous placeholder logging from the shell.")
    # Global --version (argparse will exit 0 before validating subcommands)
    parser.add_argument(
        "--version",
        action="version",
        version=f"asynclog {__version__}",
        help="Show version and exit",
    )
    sub = parser.add_subparsers(dest="cmd")

    emit_parser = sub.add_parser("emit", help="Log a single message")
    emit_parser.add_argument("level", help="debug, info, warn or error")
    emit_parser.add_argument("template", help="Message template; each {} takes the next value")
    emit_parser.add_argument("values", nargs="*", help="Values substituted into the template")
    emit_parser.add_argument("--raw", action="store_true", help="Keep values as text (no int/float coercion)")
    _add_output_options(emit_parser)
    emit_parser.set_defaults(func=cmd_emit)

    replay_parser = sub.add_parser("replay", help="Log every record of a JSON lines file")
    replay_parser.add_argument("file", help='JSONL of {"level": ..., "values": [template, ...]}; - for stdin')
    replay_parser.add_argument("--threads", type=int, default=1, help="Producer threads submitting records")
    _add_output_options(replay_parser)
    replay_parser.set_defaults(func=cmd_replay)

    bench_parser = sub.add_parser("bench", help="Measure throughput with concurrent producers")
    bench_parser.add_argument("--threads", type=int, default=4, help="Producer threads")
    bench_parser.add_argument("--messages", type=int, default=10000, help="Messages per producer")
    bench_parser.set_defaults(func=cmd_bench)

    # Simple 'version' subcommand for shells/users preferring explicit command
    version_parser = sub.add_parser("version", help="Show version and exit")
    version_parser.set_defaults(func=lambda _: (print(f"asynclog {__version__}"), 0)[1])

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "cmd", None):  # No subcommand provided
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
