from __future__ import annotations

from pathlib import Path

from .logging.log_summary import (
    format_single_summary,
    format_summary_table,
    parse_log_details,
    summarize_logs,
)


class LogStore:
    """Reads the JSONL run logs written by AuditLogger."""

    def __init__(self, *, logs_dir: Path) -> None:
        self._logs_dir = logs_dir

    def read_log(self, run_id: str, verbose: bool) -> list[str]:
        """Read and format the log of a single run.

        Args:
            run_id: Run identifier (the log file name without extension)
            verbose: If True, return raw log lines; if False, return summary

        Returns:
            List of formatted log lines

        Raises:
            FileNotFoundError: If log file doesn't exist
        """
        log_fp = self._logs_dir / f"{run_id}.jsonl"
        if not log_fp.exists():
            raise FileNotFoundError(f"Log file not found: {log_fp}")

        if verbose:
            return log_fp.read_text(encoding="utf-8").splitlines()

        return format_single_summary(parse_log_details(log_fp))

    def summarize_all(self, verbose: bool) -> list[str]:
        summaries = summarize_logs(self._logs_dir, verbose=verbose)
        return format_summary_table(summaries, verbose=verbose)
