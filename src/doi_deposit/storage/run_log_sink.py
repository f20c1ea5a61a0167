"""
Run log sinks: where the execution log goes once a run completes.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from ..core.collaborators import RunLogSink
from ..core.models import LogEntry


logger = logging.getLogger(__name__)


class JsonlRunLogSink(RunLogSink):
    """
    Appends run log entries as JSON lines.

    One file per run: {base_dir}/{run_id}.jsonl
    """

    def __init__(self, base_dir: Path, create_dirs: bool = True):
        self.base_dir = Path(base_dir)
        self.create_dirs = create_dirs

        if create_dirs:
            self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, run_id: str) -> Path:
        safe_run_id = run_id.replace("/", "_").replace("\\", "_").replace(":", "_")
        return self.base_dir / f"{safe_run_id}.jsonl"

    def flush(self, run_id: str, entries: Iterable[LogEntry]) -> None:
        file_path = self.path_for(run_id)
        count = 0

        with open(file_path, "a", encoding="utf-8") as f:
            for entry in entries:
                record = entry.to_dict()
                record["run_id"] = run_id
                f.write(json.dumps(record, ensure_ascii=False, default=str))
                f.write("\n")
                count += 1

        logger.info(f"Flushed {count} run log entries to: {file_path}")


class NullRunLogSink(RunLogSink):
    """Discards run log entries."""

    def flush(self, run_id: str, entries: Iterable[LogEntry]) -> None:
        pass
