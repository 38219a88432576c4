import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from colorama import Fore, Style

DEBUG = "DEBUG"
INFO = "INFO"
SUCCESS = "SUCCESS"
WARNING = "WARNING"
ERROR = "ERROR"


@dataclass(frozen=True)
class Event:
    type: str
    level: str
    message: str
    run_id: str
    timestamp: float
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "level": self.level,
            "message": self.message,
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "data": self.data,
        }


Sink = Callable[[Event], None]


class EventLog:
    """
    Structured run log. Every component reports through ``log_event`` and the
    log fans each record out to its sinks (console, JSONL file, or a test's
    list). Nothing here writes to stdout directly.
    """
    def __init__(self, sinks: Optional[List[Sink]] = None, run_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.sinks: List[Sink] = list(sinks or [])
        self.events: List[Event] = []

    def add_sink(self, sink: Sink):
        self.sinks.append(sink)

    def log_event(self, event_type: str, message: str = "", level: str = INFO, **data) -> Event:
        event = Event(
            type=event_type,
            level=level,
            message=message,
            run_id=self.run_id,
            timestamp=time.time(),
            data=data,
        )
        self.events.append(event)
        for sink in self.sinks:
            sink(event)
        return event

    def debug(self, event_type: str, message: str = "", **data) -> Event:
        return self.log_event(event_type, message, DEBUG, **data)

    def info(self, event_type: str, message: str = "", **data) -> Event:
        return self.log_event(event_type, message, INFO, **data)

    def success(self, event_type: str, message: str = "", **data) -> Event:
        return self.log_event(event_type, message, SUCCESS, **data)

    def warning(self, event_type: str, message: str = "", **data) -> Event:
        return self.log_event(event_type, message, WARNING, **data)

    def error(self, event_type: str, message: str = "", **data) -> Event:
        return self.log_event(event_type, message, ERROR, **data)

    def of_type(self, event_type: str) -> List[Event]:
        return [e for e in self.events if e.type == event_type]


_PREFIX = {
    DEBUG: ("[.]", Style.DIM),
    INFO: ("[*]", ""),
    SUCCESS: ("[+]", Fore.GREEN),
    WARNING: ("[!]", Fore.YELLOW),
    ERROR: ("[-]", Fore.RED),
}


class ConsoleSink:
    """Prints events as prefixed, colored lines. DEBUG events only when verbose."""
    def __init__(self, verbose: bool = False, stream=None):
        self.verbose = verbose
        self.stream = stream

    def __call__(self, event: Event):
        if event.level == DEBUG and not self.verbose:
            return
        prefix, color = _PREFIX.get(event.level, ("[*]", ""))
        print(f"   {color}{prefix} {event.message}{Style.RESET_ALL}", file=self.stream)


class JsonlFileSink:
    """Appends one JSON object per event, persisted immediately."""
    def __init__(self, path: str):
        self.path = path

    def __call__(self, event: Event):
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event.to_dict(), default=str) + "\n")
