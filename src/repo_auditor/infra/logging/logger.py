from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler


class AuditLogger(Resource):
    """Structured logger for one audit run.

    Each run writes `<logs_dir>/<run_id>.jsonl`. Every record carries the run
    context (`run_id`, `command`) next to the keyword fields of the call, so a
    line can be attributed without the rest of its file.
    """

    def init(
        self,
        *,
        run_id: str | None = None,
        command: str | None = None,
        logs_dir: Path,
        logger_name: str = "repo_auditor.audit",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "AuditLogger":
        """Initialize the logger for one run.

        Args:
            run_id: Run identifier; a JSONL file handler is only attached when set
            command: CLI command of the run, added to every record
            logs_dir: Directory to store log files
            logger_name: Logger name
            console_output: Whether to enable console output
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = getattr(logging, level.upper())
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        self._context = {k: v for k, v in (("run_id", run_id), ("command", command)) if v is not None}
        self._handlers: list[logging.Handler] = []

        if run_id:
            self._handlers.append(build_json_file_handler(logs_dir / f"{run_id}.jsonl", level=numeric_level))
        if console_output:
            self._handlers.append(build_human_console_handler(level=numeric_level))
        for handler in self._handlers:
            self._logger.addHandler(handler)

        return self

    def shutdown(self, resource: "AuditLogger") -> None:
        """Flush and close handlers so the log file is complete once the run ends."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def _log(self, level: int, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        # call fields win over the run context
        self._logger.log(level, message, extra={**self._context, **fields}, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs, exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs, exc_info=True)
