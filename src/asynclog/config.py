from dataclasses import dataclass
from typing import Optional


@dataclass
class EngineConfig:
    # Destination: "stdout", "stderr" or "file"
    sink: str = "stdout"
    # Required when sink == "file"; lines are appended
    path: Optional[str] = None
    # Colourise stream sinks per level (rich); ignored for files
    color: bool = False
    # Name of the background worker thread
    thread_name: str = "asynclog-worker"
    # Seconds shutdown() waits for the worker to drain; None waits forever
    join_timeout: Optional[float] = None


SINK_CHOICES = ("stdout", "stderr", "file")
