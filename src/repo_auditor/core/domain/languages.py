from __future__ import annotations


# Languages whose dependencies the secondary scanner can monitor.
SNYK_SUPPORTED_LANGUAGES: frozenset[str] = frozenset({
    "C#",
    "CSS",
    "Dockerfile",
    "Go",
    "HCL",
    "HTML",
    "Java",
    "JavaScript",
    "Kotlin",
    "Makefile",
    "PHP",
    "Python",
    "Ruby",
    "Scala",
    "Shell",
    "Swift",
    "TypeScript",
})

# Languages the baseline dependency-alerting service understands natively.
# Languages without a package manager are included as they have nothing to track.
DEPENDABOT_SUPPORTED_LANGUAGES: frozenset[str] = frozenset({
    "C#",
    "CSS",
    "Dockerfile",
    "Elixir",
    "Go",
    "HCL",
    "HTML",
    "Java",
    "JavaScript",
    "Makefile",
    "PHP",
    "Python",
    "Ruby",
    "Rust",
    "SCSS",
    "Shell",
    "Swift",
    "TypeScript",
})

# Languages covered by dependency-graph submission from CI, and the action each one needs.
DEPENDENCY_SUBMISSION_WORKFLOWS: dict[str, str] = {
    "Scala": "scalacenter/sbt-dependency-submission",
    "Kotlin": "gradle/actions/dependency-submission",
}

DEPENDENCY_GRAPH_LANGUAGES: tuple[str, ...] = tuple(DEPENDENCY_SUBMISSION_WORKFLOWS)
