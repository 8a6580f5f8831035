from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from ..core.domain.exceptions import ResultsNotFoundError
from ..core.domain.models import EvaluationResult, RepositoryRules, Vulnerability


VERDICTS_FILE = "verdicts.json"
VULNERABILITIES_FILE = "vulnerabilities.json"

_rules_adapter = TypeAdapter(list[RepositoryRules])
_vulns_adapter = TypeAdapter(list[Vulnerability])


class JsonResultStore:
    """Persists the outcome of the latest evaluation, replacing the previous one."""

    def __init__(self, *, results_dir: Path) -> None:
        self._results_dir = results_dir

    def _write(self, name: str, payload: Any) -> None:
        fp = self._results_dir / name
        tmp = fp.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(fp)

    def _read(self, name: str) -> Any:
        fp = self._results_dir / name
        if not fp.exists():
            raise ResultsNotFoundError(name)
        return json.loads(fp.read_text(encoding="utf-8"))

    def save(self, results: list[EvaluationResult]) -> None:
        rules = [r.rules for r in results]
        vulns = [v for r in results for v in r.vulnerabilities]
        self._write(VERDICTS_FILE, _rules_adapter.dump_python(rules, mode="json"))
        self._write(VULNERABILITIES_FILE, _vulns_adapter.dump_python(vulns, mode="json"))

    def load_rules(self) -> list[RepositoryRules]:
        return _rules_adapter.validate_python(self._read(VERDICTS_FILE))

    def load_vulnerabilities(self) -> list[Vulnerability]:
        return _vulns_adapter.validate_python(self._read(VULNERABILITIES_FILE))
