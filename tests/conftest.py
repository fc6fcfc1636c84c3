"""
Shared fixtures for the scorecard test suite.
"""

from datetime import datetime, timedelta, timezone

import pytest

from scorecard.checker.raw_results import (
    BinaryArtifactData,
    Changeset,
    CodeReviewData,
    Dependency,
    DependencyUseType,
    File,
    PinningDependenciesData,
    RawResults,
    Review,
    User,
    VulnerabilitiesData,
)
from scorecard.probes import build_registry

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def registry():
    return build_registry()


@pytest.fixture
def now():
    return NOW


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def approved_changeset(revision: str, author: str = "alice", reviewer: str = "bob") -> Changeset:
    return Changeset(
        revision_id=revision,
        author=User(login=author),
        reviews=(Review(state="APPROVED", author=User(login=reviewer)),),
    )


def unreviewed_changeset(revision: str, author: str = "alice") -> Changeset:
    return Changeset(revision_id=revision, author=User(login=author))


def action(name: str, pinned, owner: str = "actions") -> Dependency:
    snippet = f"{owner}/{name}@v4"
    return Dependency(
        type=DependencyUseType.GITHUB_ACTION,
        name=f"{owner}/{name}",
        location=File(path=".github/workflows/ci.yml", offset=12, snippet=snippet),
        pinned=pinned,
    )


@pytest.fixture
def clean_raw():
    """Raw results that satisfy every attestation rule."""
    return RawResults(
        now=NOW,
        binary_artifacts=BinaryArtifactData(files=()),
        vulnerabilities=VulnerabilitiesData(vulnerabilities=()),
        pinning_dependencies=PinningDependenciesData(dependencies=(
            action("checkout", True),
            action("setup-thing", True, owner="acme"),
        )),
        code_review=CodeReviewData(default_branch_changesets=(
            approved_changeset("c1"),
            approved_changeset("c2"),
        )),
    )
