"""
Sinks for completed feedback submissions.

A completed session is summarised into a CompletionRecord exactly once.
The logging sink prints the record to the application log and, when
FEEDBACK_LOG_PATH is configured, appends it as one JSON line to that file.
"""

import json
from pathlib import Path
from typing import Optional, Protocol, Union

from app.logging import setup_logger, setup_record_logger
from app.services.common.types import CompletionRecord


class CompletionSink(Protocol):
    def write(self, record: CompletionRecord) -> None: ...


class LoggingCompletionSink:
    """Write completion records to the log and an optional JSON lines file"""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.logger = setup_logger(__name__)
        self.path = Path(path) if path else None
        self._record_logger = (
            setup_record_logger(f"{__name__}.records", self.path)
            if self.path
            else None
        )

    def write(self, record: CompletionRecord) -> None:
        payload = record.model_dump(mode="json")

        self.logger.info(
            "FEEDBACK COLLECTION COMPLETED:\n"
            "=====================================\n"
            f"{json.dumps(payload, indent=2, ensure_ascii=False)}\n"
            "====================================="
        )

        if self._record_logger is not None:
            self._record_logger.info(json.dumps(payload, ensure_ascii=False))

