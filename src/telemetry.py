"""Timing spans for render / enhance / export runs.

Usage:
    tel = Telemetry()

    with tel.span("pages"):
        for page in pages:
            with tel.span("render"):
                ...
            with tel.span("enhance"):
                ...

    with tel.span("export"):
        ...

    print(tel.summary())

Spans opened repeatedly under the same parent (one per page) are aggregated
in the summary: total duration and call count per path.
"""
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional


@dataclass
class Span:
    name: str
    path: str
    started: float
    seconds: Optional[float] = None

    @property
    def depth(self) -> int:
        return self.path.count("/")

    @property
    def parent_path(self) -> Optional[str]:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else None


@dataclass
class StageTotal:
    name: str
    depth: int
    parent: Optional[str]
    seconds: float = 0.0
    count: int = 0


class Telemetry:
    """Records nested, named timing spans for one run."""

    def __init__(self):
        self.spans: List[Span] = []
        self._open: List[str] = []
        self._created = time.monotonic()

    @contextmanager
    def span(self, name: str) -> Iterator[Span]:
        path = "/".join(self._open + [name])
        record = Span(name=name, path=path, started=time.monotonic())
        self.spans.append(record)
        self._open.append(name)
        try:
            yield record
        finally:
            record.seconds = time.monotonic() - record.started
            self._open.pop()

    def elapsed(self) -> float:
        """Seconds since this Telemetry was created."""
        return time.monotonic() - self._created

    def totals(self) -> Dict[str, StageTotal]:
        """Finished spans grouped by path, in first-opened order."""
        grouped: Dict[str, StageTotal] = {}
        for record in self.spans:
            if record.seconds is None:
                continue
            stage = grouped.get(record.path)
            if stage is None:
                stage = grouped[record.path] = StageTotal(
                    name=record.name, depth=record.depth, parent=record.parent_path
                )
            stage.seconds += record.seconds
            stage.count += 1
        return grouped

    def summary(self) -> str:
        """Formatted timing table."""
        grouped = self.totals()
        if not grouped:
            return "No timing data."

        elapsed = self.elapsed()
        rule = "-" * 60
        rows = ["", "TIMING", rule, f"{'Stage':<30} {'Calls':>6} {'Seconds':>10} {'%':>8}", rule]
        for stage in grouped.values():
            label = "  " * stage.depth + stage.name
            share = stage.seconds / elapsed * 100 if elapsed else 0.0
            rows.append(f"{label:<30} {stage.count:>6} {stage.seconds:>10.2f} {share:>7.1f}%")
        rows += [rule, f"{'Total':<30} {'':>6} {elapsed:>10.2f}", ""]
        return "\n".join(rows)

    def to_dict(self) -> Dict:
        """JSON-serializable timing tree."""
        grouped = self.totals()

        def subtree(parent: Optional[str]) -> List[Dict]:
            nodes = []
            for path, stage in grouped.items():
                if stage.parent != parent:
                    continue
                node = {"name": stage.name, "count": stage.count, "duration_seconds": round(stage.seconds, 3)}
                children = subtree(path)
                if children:
                    node["children"] = children
                nodes.append(node)
            return nodes

        return {
            "elapsed_seconds": round(self.elapsed(), 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "spans": subtree(None),
        }
