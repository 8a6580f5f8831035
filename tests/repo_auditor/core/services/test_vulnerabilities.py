"""Tests for scanner normalisation, SLA and CVE deduplication."""
from datetime import datetime, timezone

from repo_auditor.core.services.vulnerabilities import (
    attach_owners,
    collect_urgent_dependabot_vulnerabilities,
    collect_urgent_snyk_vulnerabilities,
    deduplicate_vulnerabilities_by_cve,
    dependabot_alert_to_vulnerability,
    has_old_alerts,
    is_within_sla,
    snyk_issue_to_vulnerability,
    snyk_vuln_id_filter,
    string_to_severity,
    url_sort_key,
    vuln_sort_key,
)

from tests.repo_auditor.factories import (
    make_dependabot_alert,
    make_owner,
    make_repo,
    make_snyk_issue,
    make_snyk_project,
    make_team,
    make_vuln,
)


JAN_20 = datetime(2024, 1, 20, tzinfo=timezone.utc)


def test_string_to_severity():
    assert string_to_severity("HIGH") == "high"
    assert string_to_severity("critical") == "critical"
    assert string_to_severity("moderate") == "unknown"
    assert string_to_severity(None) == "unknown"


def test_url_sort_key_ranks_scanner_advisories_first():
    assert url_sort_key("https://security.snyk.io/vuln/SNYK-1") == -2
    assert url_sort_key("https://snyk.io/vuln/SNYK-1") == -2
    assert url_sort_key("https://github.com/advisories/GHSA-1") == -1
    assert url_sort_key("https://github.com/guardian/service") == 0
    assert url_sort_key("https://nvd.nist.gov/vuln/detail/CVE-1") == 0


def test_url_sort_key_tolerates_malformed_urls():
    assert url_sort_key("http://[::1") == 0
    assert url_sort_key("CVE-2024-0001") == 0


def test_vuln_sort_key_orders_by_severity_then_patchability():
    vulns = [
        make_vuln(severity="high", is_patchable=False),
        make_vuln(severity="critical", is_patchable=False),
        make_vuln(severity="high", is_patchable=True),
        make_vuln(severity="unknown", is_patchable=True),
    ]

    ordered = sorted(vulns, key=vuln_sort_key)

    assert [(v.severity, v.is_patchable) for v in ordered] == [
        ("critical", False),
        ("high", True),
        ("high", False),
        ("unknown", True),
    ]


def test_dependabot_alert_normalisation():
    alert = make_dependabot_alert()

    vuln = dependabot_alert_to_vulnerability("guardian/service", alert, now=JAN_20)

    assert vuln.source == "Dependabot"
    assert vuln.full_name == "guardian/service"
    assert vuln.open is True
    assert vuln.severity == "high"
    assert vuln.package == "lodash"
    assert vuln.ecosystem == "npm"
    assert vuln.cves == ("CVE-2024-0001",)
    assert vuln.urls == (
        "https://github.com/advisories/GHSA-aaaa-bbbb-cccc",
        "https://nvd.nist.gov/vuln/detail/CVE-2024-0001",
    )
    assert vuln.is_patchable is True
    assert vuln.alert_issue_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert vuln.within_sla is True


def test_dependabot_alert_without_patch():
    alert = make_dependabot_alert(
        state="dismissed",
        security_vulnerability={"package": {"name": "left-pad", "ecosystem": "npm"}, "first_patched_version": None},
    )

    vuln = dependabot_alert_to_vulnerability("guardian/service", alert, now=JAN_20)

    assert vuln.is_patchable is False
    assert vuln.open is False


def test_snyk_id_filter_prefers_cves():
    assert snyk_vuln_id_filter(["SNYK-JS-1", "CVE-2024-1", "CWE-79"]) == ["CVE-2024-1"]
    assert snyk_vuln_id_filter(["SNYK-JS-1", "CWE-79"]) == ["SNYK-JS-1", "CWE-79"]
    assert snyk_vuln_id_filter([]) == []


def test_snyk_issue_normalisation():
    issue = make_snyk_issue("project-1")
    projects = [make_snyk_project(id="project-1", type="npm")]

    vuln = snyk_issue_to_vulnerability("guardian/service", issue, projects, now=JAN_20)

    assert vuln.source == "Snyk"
    assert vuln.severity == "critical"
    assert vuln.package == "fetch, axios"
    assert vuln.ecosystem == "npm"
    assert vuln.cves == ("CVE-2024-0002",)
    assert vuln.urls[0] == "https://security.snyk.io/vuln/SNYK-JS-AXIOS-1"
    assert vuln.is_patchable is True
    # critical issues must be fixed within two days
    assert vuln.within_sla is False


def test_snyk_issue_without_project_or_coordinates():
    issue = make_snyk_issue("missing", coordinates=None)

    vuln = snyk_issue_to_vulnerability("guardian/service", issue, [], now=JAN_20)

    assert vuln.ecosystem == "unknown ecosystem"
    assert vuln.package == ""
    assert vuln.is_patchable is False


def test_snyk_issue_skips_null_representations():
    issue = make_snyk_issue(
        coordinates=[
            {
                "is_upgradeable": False,
                "is_patchable": False,
                "is_pinnable": True,
                "representations": [None, {"dependency": {"package_name": "axios"}}],
            }
        ]
    )

    vuln = snyk_issue_to_vulnerability("guardian/service", issue, [], now=JAN_20)

    assert vuln.package == "axios"
    assert vuln.is_patchable is True


def test_sla_deadlines():
    issued = datetime(2024, 2, 1, tzinfo=timezone.utc)
    now = datetime(2024, 2, 6, tzinfo=timezone.utc)

    assert not is_within_sla(issued, "critical", now)
    assert is_within_sla(issued, "high", now)
    assert is_within_sla(datetime(2020, 1, 1), "medium", now)
    assert is_within_sla(datetime(2020, 1, 1), "unknown", now)


def test_old_alerts_only_reported_for_production():
    overdue = make_vuln(severity="critical", alert_issue_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
    now = datetime(2024, 2, 6, tzinfo=timezone.utc)

    assert has_old_alerts([overdue], make_repo(), now)
    assert not has_old_alerts([overdue], make_repo(topics=("testing",)), now)
    assert not has_old_alerts([], make_repo(), now)


def test_collect_urgent_snyk_vulnerabilities():
    repo = make_repo()
    projects = [
        make_snyk_project(id="project-1", repo="guardian/service"),
        make_snyk_project(id="project-2", repo="guardian/other"),
    ]
    issues = [
        make_snyk_issue("project-1"),
        make_snyk_issue("project-1", effective_severity_level="medium"),
        make_snyk_issue("project-1", status="resolved"),
        make_snyk_issue("project-2"),
    ]

    vulns = collect_urgent_snyk_vulnerabilities(repo, issues, projects, now=JAN_20)

    assert len(vulns) == 1
    assert vulns[0].severity == "critical"
    assert collect_urgent_snyk_vulnerabilities(make_repo(topics=()), issues, projects) == []


def test_collect_urgent_dependabot_vulnerabilities():
    production = make_repo()
    prototype = make_repo(id=2, name="proto", full_name="guardian/proto", topics=("prototype",))
    alerts = {
        "guardian/service": (
            make_dependabot_alert(),
            make_dependabot_alert(state="fixed"),
            make_dependabot_alert(security_advisory={"severity": "medium"}),
        ),
        "guardian/proto": (make_dependabot_alert(),),
    }

    vulns = collect_urgent_dependabot_vulnerabilities([production, prototype], alerts, now=JAN_20)

    assert [(v.full_name, v.severity) for v in vulns] == [("guardian/service", "high")]


def test_collect_urgent_dependabot_vulnerabilities_skips_development_dependencies():
    alerts = {
        "guardian/service": (
            make_dependabot_alert(dependency={"scope": "development"}),
            make_dependabot_alert(dependency={"scope": "runtime"}),
            make_dependabot_alert(dependency={"scope": None}),
        ),
    }

    vulns = collect_urgent_dependabot_vulnerabilities([make_repo()], alerts, now=JAN_20)

    assert len(vulns) == 2


def test_dedup_keeps_most_severe_record_per_cve():
    high = make_vuln(severity="high", cves=("CVE-2024-0001",), source="Dependabot")
    critical = make_vuln(severity="critical", cves=("CVE-2024-0001",), source="Snyk")
    other = make_vuln(severity="high", cves=("CVE-2024-0003",))

    result = deduplicate_vulnerabilities_by_cve([high, critical, other])

    assert [(v.source, v.severity, v.cves) for v in result] == [
        ("Snyk", "critical", ("CVE-2024-0001",)),
        ("Dependabot", "high", ("CVE-2024-0003",)),
    ]


def test_dedup_prefers_patchable_on_equal_severity():
    unpatchable = make_vuln(is_patchable=False, package="a")
    patchable = make_vuln(is_patchable=True, package="b")

    result = deduplicate_vulnerabilities_by_cve([unpatchable, patchable])

    assert [v.package for v in result] == ["b"]


def test_dedup_matches_cve_sets_regardless_of_order():
    first = make_vuln(cves=("CVE-2024-0002", "CVE-2024-0001"), severity="high")
    second = make_vuln(cves=("CVE-2024-0001", "CVE-2024-0002"), severity="critical")

    result = deduplicate_vulnerabilities_by_cve([first, second])

    assert len(result) == 1
    assert result[0].severity == "critical"
    assert result[0].cves == ("CVE-2024-0001", "CVE-2024-0002")
    # inputs are left untouched
    assert first.cves == ("CVE-2024-0002", "CVE-2024-0001")


def test_dedup_keeps_all_records_without_cves():
    a = make_vuln(cves=(), package="a")
    b = make_vuln(cves=(), package="b")
    c = make_vuln(cves=("CVE-2024-0001",), package="c")

    result = deduplicate_vulnerabilities_by_cve([a, b, c])

    assert [v.package for v in result] == ["c", "a", "b"]
    assert deduplicate_vulnerabilities_by_cve(result) == result


def test_attach_owners_copies_per_team_and_drops_unowned():
    team_a = make_team(id=1, slug="team-a")
    team_b = make_team(id=2, slug="team-b")
    owned = make_vuln(full_name="guardian/service")
    orphan = make_vuln(full_name="guardian/orphan")
    ownership = [make_owner("guardian/service", team_a), make_owner("guardian/service", team_b)]

    result = attach_owners([owned, orphan], ownership)

    assert [(v.full_name, v.repo_owner) for v in result] == [
        ("guardian/service", "team-a"),
        ("guardian/service", "team-b"),
    ]
