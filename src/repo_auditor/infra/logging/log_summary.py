from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator


@dataclass
class RunSummary:
    run_id: str
    command: str = ""
    run_date: str = ""
    evaluated: int = 0
    vulnerabilities: int = 0
    digests: int = 0
    digests_sent: bool = False
    remediations: int = 0
    remediations_skipped: int = 0
    remediations_failed: int = 0
    dependency_graph_events: int = 0
    errors: int = 0
    done: bool = False
    event_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class LogDetails:
    run_id: str
    command: str = ""
    run_date: str = ""
    lines: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)


def _records(fp: Path) -> Iterator[dict[str, Any]]:
    for line in fp.read_text(encoding="utf-8").splitlines():
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            yield obj


def _file_date(fp: Path) -> str:
    return datetime.fromtimestamp(fp.stat().st_mtime).strftime("%Y-%m-%d %H:%M:%S")


def parse_log_details(fp: Path) -> LogDetails:
    """Parse a single JSONL run log into a short human summary."""
    details = LogDetails(run_id=fp.stem)

    for obj in _records(fp):
        msg = obj.get("message")

        if msg == "run_started":
            details.command = str(obj.get("command") or "")
            details.run_date = str(obj.get("timestamp") or "")
        elif msg == "snapshot_loaded":
            details.lines.append(
                f"Snapshot: {obj.get('repositories', 0)} repositories, {obj.get('unarchived', 0)} unarchived"
            )
        elif msg == "evaluation_finished":
            details.lines.append(
                f"Evaluated: {obj.get('evaluated', 0)} repositories, {obj.get('vulnerabilities', 0)} vulnerabilities"
            )
        elif msg == "digest_composed":
            details.lines.append(f"Digest: {obj.get('team_slug', '')}")
        elif msg == "digests_sent":
            details.lines.append(f"Sent {obj.get('count', 0)} digests")
        elif msg == "digests_skipped":
            details.lines.append(
                f"Not sending {obj.get('count', 0)} digests (stage {obj.get('stage', '')}, {obj.get('date', '')})"
            )
        elif msg == "remediation_selected":
            selected = obj.get("selected") or []
            details.lines.append(f"Selected for protection: {', '.join(selected) or '-'}")
        elif msg == "remediation_applied":
            details.lines.append(f"Protected: {obj.get('full_name', '')} ({obj.get('branch', '')})")
        elif msg == "remediation_skipped":
            details.lines.append(f"Already protected: {obj.get('full_name', '')}")
        elif msg == "remediation_failed":
            details.failures.append(f"{obj.get('full_name', '')}: {obj.get('error', '')}")
        elif msg == "dependency_graph_requested":
            repos = obj.get("repos") or []
            details.lines.append(f"Dependency graph integration: {', '.join(repos)}")
        elif msg == "dependency_graph_skipped":
            details.lines.append("Dependency graph integration: nothing to do")

    if not details.run_date:
        details.run_date = _file_date(fp)
    return details


def parse_log_file(fp: Path, verbose: bool = False) -> RunSummary:
    summary = RunSummary(run_id=fp.stem)

    for obj in _records(fp):
        msg = obj.get("message")
        if verbose and isinstance(msg, str):
            summary.event_counts[msg] = summary.event_counts.get(msg, 0) + 1

        if obj.get("level") == "ERROR":
            summary.errors += 1

        if msg == "run_started":
            summary.command = str(obj.get("command") or "")
            summary.run_date = str(obj.get("timestamp") or "")
        elif msg == "evaluation_finished":
            summary.evaluated = int(obj.get("evaluated") or 0)
            summary.vulnerabilities = int(obj.get("vulnerabilities") or 0)
        elif msg == "digest_composed":
            summary.digests += 1
        elif msg == "digests_sent":
            summary.digests_sent = True
        elif msg == "remediation_applied":
            summary.remediations += 1
        elif msg == "remediation_skipped":
            summary.remediations_skipped += 1
        elif msg == "remediation_failed":
            summary.remediations_failed += 1
        elif msg == "dependency_graph_requested":
            summary.dependency_graph_events = len(obj.get("repos") or [])
        elif msg == "run_finished":
            summary.done = True

    if not summary.run_date:
        summary.run_date = _file_date(fp)
    return summary


def summarize_logs(logs_dir: Path, verbose: bool = False) -> dict[str, RunSummary]:
    try:
        files = sorted([p for p in logs_dir.glob("*.jsonl") if p.is_file()])
    except FileNotFoundError:
        files = []

    items = [parse_log_file(fp, verbose=verbose) for fp in files]
    items.sort(key=lambda s: s.run_date or "", reverse=True)

    return {s.run_id: s for s in items}


def _outcome(s: RunSummary) -> str:
    if s.command == "evaluate":
        return f"{s.evaluated} repos, {s.vulnerabilities} vulns"
    if s.command == "digest":
        return f"{s.digests} digests" + (" (sent)" if s.digests_sent else "")
    if s.command == "protect-branches":
        parts = [f"{s.remediations} protected"]
        if s.remediations_skipped:
            parts.append(f"{s.remediations_skipped} skipped")
        if s.remediations_failed:
            parts.append(f"{s.remediations_failed} failed")
        return ", ".join(parts)
    if s.command == "dependency-graph":
        return f"{s.dependency_graph_events} requested"
    return ""


def format_summary_table(summaries: dict[str, RunSummary], verbose: bool = False) -> list[str]:
    if not summaries:
        return ["No logs found."]

    rows: list[tuple[str, str, str, str, str, str]] = []
    for run_id, s in summaries.items():
        event_details = ""
        if verbose and s.event_counts:
            event_details = "(" + ", ".join(f"{k}: {v}" for k, v in sorted(s.event_counts.items())) + ")"
        rows.append((
            run_id,
            s.command,
            _outcome(s),
            "yes" if s.done else "no",
            s.run_date,
            event_details,
        ))

    run_w = max(3, max(len(r[0]) for r in rows))
    cmd_w = max(7, max(len(r[1]) for r in rows))
    out_w = max(7, max(len(r[2]) for r in rows))

    header_parts = [
        'Run'.rjust(run_w),
        'Command'.rjust(cmd_w),
        'Outcome'.rjust(out_w),
        'Done',
        'RunDate',
    ]
    if verbose:
        header_parts.append('Events')

    lines: list[str] = ["  ".join(header_parts)]
    for run_id, command, outcome, done, run_date, event_details in rows:
        parts = [
            run_id.rjust(run_w),
            command.rjust(cmd_w),
            outcome.rjust(out_w),
            done.rjust(4),
            run_date,
        ]
        if verbose and event_details:
            parts.append(event_details)
        lines.append("  ".join(parts))
    return lines


def format_single_summary(details: LogDetails) -> list[str]:
    """Render a concise multi-line summary for a single run."""
    lines: list[str] = [f"Run:     {details.run_id}"]
    if details.command:
        lines.append(f"Command: {details.command}")
    if details.run_date:
        lines.append(f"Date:    {details.run_date}")
    lines.extend(details.lines)
    if details.failures:
        lines.append("Failures:")
        lines.extend(f"  {f}" for f in details.failures)
    if len(lines) == 1:
        lines.append("No summary available.")
    return lines
