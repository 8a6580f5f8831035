"""Shared test fixtures and fakes for UseCase tests."""
from repo_auditor.core.domain.exceptions import ResultsNotFoundError
from repo_auditor.core.domain.models import Snapshot


class FakeSnapshot:
    def __init__(self, snapshot: Snapshot | None = None):
        self.snapshot = snapshot or Snapshot()
        self.load_calls = 0

    def load(self) -> Snapshot:
        self.load_calls += 1
        return self.snapshot


class FakeResultStore:
    def __init__(self, rules=None, vulnerabilities=None):
        self.rules = rules
        self.vulnerabilities = vulnerabilities
        self.saved = []

    def save(self, results) -> None:
        self.saved.append(list(results))
        self.rules = [r.rules for r in results]
        self.vulnerabilities = [v for r in results for v in r.vulnerabilities]

    def load_rules(self):
        if self.rules is None:
            raise ResultsNotFoundError("verdicts.json")
        return list(self.rules)

    def load_vulnerabilities(self):
        if self.vulnerabilities is None:
            raise ResultsNotFoundError("vulnerabilities.json")
        return list(self.vulnerabilities)


class FakeNotifier:
    def __init__(self):
        self.digests = []
        self.notifications = []

    def send_digest(self, digest) -> None:
        self.digests.append(digest)

    def notify_branch_protected(self, full_name: str, team_slug: str) -> None:
        self.notifications.append((full_name, team_slug))


class FakeSink:
    def __init__(self, fail_for=()):
        self.protections = []
        self.dependency_graph_events = []
        self.fail_for = set(fail_for)

    def apply_branch_protection(self, event) -> None:
        if event.full_name in self.fail_for:
            raise RuntimeError(f"transport rejected {event.full_name}")
        self.protections.append(event)

    def request_dependency_graph_integration(self, event) -> None:
        self.dependency_graph_events.append(event)


class FakeLogStore:
    def __init__(self):
        self.read_calls = []
        self.summarize_calls = []

    def read_log(self, run_id: str, verbose: bool) -> list[str]:
        self.read_calls.append((run_id, verbose))
        if verbose:
            return [
                '{"message": "run_started", "command": "evaluate"}',
                '{"message": "run_finished", "command": "evaluate"}',
            ]
        return ["Run:     evaluate-TEST"]

    def summarize_all(self, verbose: bool) -> list[str]:
        self.summarize_calls.append(verbose)
        lines = [
            "Run  Command  Outcome  Done  RunDate",
            "evaluate-1  evaluate  3 repos, 1 vulns  yes  2024-02-06",
        ]
        if verbose:
            lines[1] += "  (run_finished: 1)"
        return lines


class FakeLogger:
    """Fake logger recording the events it is given."""

    def __init__(self):
        self.events = []

    def _record(self, level, message, kwargs):
        self.events.append((level, message, kwargs))

    def debug(self, message: str, **kwargs) -> None:
        self._record("debug", message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._record("info", message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._record("warning", message, kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._record("error", message, kwargs)

    def exception(self, message: str, **kwargs) -> None:
        self._record("error", message, kwargs)

    def messages(self) -> list[str]:
        return [m for _, m, _ in self.events]
