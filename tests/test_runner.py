"""
Tests for the check runner and reports.
"""

import pytest

from scorecard.checker import check_names as checks
from scorecard.checker.check_result import INCONCLUSIVE_RESULT_SCORE, CheckResult
from scorecard.checker.raw_results import (
    BranchProtectionRule,
    BranchProtectionsData,
    BranchRef,
    NpmPackageData,
    PullRequestReviewRule,
    RawResults,
    StatusChecksRule,
    WebhooksData,
)
from scorecard.checker.runner import CheckRunner, Report
from scorecard.config import ScorecardConfig
from scorecard.errors import ProbeExecutionError, ProbeNotFoundError, ScorecardError
from scorecard.finding.outcome import Outcome
from scorecard.probes.registry import ProbeRegistry


def _branch(name="main", **overrides):
    rule = dict(
        allow_deletions=False,
        allow_force_pushes=False,
        enforce_admins=True,
        require_last_push_approval=True,
        check_rules=StatusChecksRule(up_to_date_before_merge=True, contexts=("ci/test",)),
        required_pull_request_reviews=PullRequestReviewRule(
            required=True,
            require_code_owner_reviews=True,
            dismiss_stale_reviews=True,
            required_approving_review_count=2,
        ),
    )
    rule.update(overrides)
    return BranchRef(name=name, protected=True, protection_rule=BranchProtectionRule(**rule))


def _raw(now, *branches):
    return RawResults(now=now, branch_protection=BranchProtectionsData(
        branches=branches, codeowners_files=("CODEOWNERS",)))


class TestCheckRunner:

    def test_fully_protected_branch(self, registry, now):
        runner = CheckRunner(registry)
        result = runner.run_check(checks.BRANCH_PROTECTION, _raw(now, _branch()))
        assert result.score == 10
        assert len(result.findings) == 11

    def test_deletion_allowed_stops_at_first_tier(self, registry, now):
        runner = CheckRunner(registry)
        result = runner.run_check(checks.BRANCH_PROTECTION, _raw(now, _branch(allow_deletions=True)))
        assert result.score == 1

    def test_no_branches_is_inconclusive(self, registry, now):
        result = CheckRunner(registry).run_check(checks.BRANCH_PROTECTION, _raw(now))
        assert result.score == INCONCLUSIVE_RESULT_SCORE

    def test_probe_error_only_fails_its_check(self, registry, now):
        raw = RawResults(now=now, webhooks=WebhooksData())
        report = CheckRunner(registry).run(raw, checks=[checks.WEBHOOKS, checks.LICENSE])

        assert [c.name for c in report.checks] == [checks.LICENSE, checks.WEBHOOKS]
        license_result = report.get(checks.LICENSE)
        assert license_result.score == INCONCLUSIVE_RESULT_SCORE
        assert license_result.reason.startswith("internal error: ")
        assert report.get(checks.WEBHOOKS).score == 10

    def test_unknown_check(self, registry, now):
        with pytest.raises(ScorecardError):
            CheckRunner(registry).run(RawResults(now=now), checks=["Not-A-Check"])

    def test_config_selects_checks(self, registry, now):
        runner = CheckRunner(registry, config=ScorecardConfig(enabled_checks=[checks.WEBHOOKS]))
        report = runner.run(RawResults(now=now, webhooks=WebhooksData()), repo="github.com/org/repo", commit="abc")
        assert [c.name for c in report.checks] == [checks.WEBHOOKS]
        assert report.repo == "github.com/org/repo"
        assert report.date == now

    def test_probe_exception_becomes_runtime_error(self, now):
        def failing_probe(raw):
            raise ProbeExecutionError("nil raw data: webhooks results")

        registry = ProbeRegistry()
        registry.register("webhooksUseSecrets", failing_probe, [checks.WEBHOOKS])
        result = CheckRunner(registry).run_check(checks.WEBHOOKS, RawResults(now=now))
        assert result.error == "nil raw data: webhooks results"

    def test_check_without_probes(self, now):
        with pytest.raises(ScorecardError):
            CheckRunner(ProbeRegistry()).run_check(checks.WEBHOOKS, RawResults(now=now))

    def test_run_probes_includes_independent_probes(self, registry, now):
        raw = RawResults(now=now, webhooks=WebhooksData(), npm_package=NpmPackageData())
        findings = CheckRunner(registry).run_probes(raw, ["packagedWithNpm", "webhooksUseSecrets"])
        assert [f.probe for f in findings] == ["packagedWithNpm", "webhooksUseSecrets"]
        assert findings[0].outcome == Outcome.FALSE

    def test_run_probes_unknown_name(self, registry, now):
        with pytest.raises(ProbeNotFoundError):
            CheckRunner(registry).run_probes(RawResults(now=now), ["notARealProbe"])

    def test_run_probes_propagates_probe_errors(self, registry, now):
        with pytest.raises(ProbeExecutionError):
            CheckRunner(registry).run_probes(RawResults(now=now), ["memorysafe"])


class TestReport:

    def _report(self, now, *results):
        return Report(repo="github.com/org/repo", commit="abc", date=now, checks=list(results))

    def test_aggregate_is_risk_weighted(self, now):
        report = self._report(
            now,
            CheckResult(name=checks.DANGEROUS_WORKFLOW, score=10, reason=""),
            CheckResult(name=checks.LICENSE, score=0, reason=""),
        )
        # (10 * 10 + 0 * 2.5) / 12.5
        assert report.aggregate_score() == 8.0

    def test_aggregate_skips_inconclusive(self, now):
        report = self._report(
            now,
            CheckResult(name=checks.LICENSE, score=6, reason=""),
            CheckResult(name=checks.FUZZING, score=INCONCLUSIVE_RESULT_SCORE, reason=""),
        )
        assert report.aggregate_score() == 6.0

    def test_aggregate_without_conclusive_checks(self, now):
        assert self._report(now).aggregate_score() == -1.0

    def test_to_dict(self, now):
        data = self._report(now, CheckResult(name=checks.LICENSE, score=6, reason="license file detected")).to_dict()
        assert data['repo'] == {'name': 'github.com/org/repo', 'commit': 'abc'}
        assert data['score'] == 6.0
        assert data['checks'][0]['name'] == checks.LICENSE
