"""
Tests for the attestation policy gate.
"""

import logging

import pytest

from conftest import action, approved_changeset, unreviewed_changeset
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
    Vulnerability,
    VulnerabilitiesData,
)
from scorecard.errors import PolicyLoadError, ProbeExecutionError
from scorecard.policy.attestation import (
    AllowedDependency,
    AttestationPolicy,
    CodeReviewRequirements,
    PolicyResult,
    check_code_reviewed,
    check_pinned_dependencies,
    load_policy,
    parse_policy,
)

STRICT = AttestationPolicy(
    prevent_binary_artifacts=True,
    ensure_no_vulnerabilities=True,
    ensure_pinned_dependencies=True,
    ensure_code_reviewed=True,
)


def _with(raw, **changes):
    from dataclasses import replace
    return replace(raw, **changes)


def _binaries(*paths):
    return BinaryArtifactData(files=tuple(File(path=p) for p in paths))


class TestEvaluate:

    def test_clean_repository_passes(self, clean_raw):
        assert STRICT.evaluate(clean_raw).result == PolicyResult.PASS

    def test_disabled_rules_are_skipped(self, now):
        assert AttestationPolicy().evaluate(RawResults(now=now)).passed

    def test_allowed_binaries_pass(self, clean_raw):
        policy = AttestationPolicy(prevent_binary_artifacts=True, allowed_binary_artifacts=("a", "b"))
        raw = _with(clean_raw, binary_artifacts=_binaries("a", "b"))
        assert policy.evaluate(raw).passed

    def test_allow_list_is_a_prefix_match(self, clean_raw):
        policy = AttestationPolicy(prevent_binary_artifacts=True, allowed_binary_artifacts=("a",))
        raw = _with(clean_raw, binary_artifacts=_binaries("a", "b/a"))
        decision = policy.evaluate(raw)
        assert decision.result == PolicyResult.FAIL
        assert "b/a" in decision.reason

    def test_empty_allow_list_entry_matches_nothing(self, clean_raw):
        policy = AttestationPolicy(prevent_binary_artifacts=True, allowed_binary_artifacts=("",))
        raw = _with(clean_raw, binary_artifacts=_binaries("tool.exe"))
        assert not policy.evaluate(raw).passed

    def test_ignored_binaries_are_logged(self, clean_raw, caplog):
        policy = AttestationPolicy(prevent_binary_artifacts=True, allowed_binary_artifacts=("vendor/",))
        raw = _with(clean_raw, binary_artifacts=_binaries("vendor/lib.so"))
        with caplog.at_level(logging.INFO, logger="scorecard.policy.attestation"):
            assert policy.evaluate(raw).passed
        assert "ignoring binary artifact at vendor/lib.so due to ignored path vendor/" in caplog.text

    def test_any_vulnerability_fails(self, clean_raw):
        raw = _with(clean_raw, vulnerabilities=VulnerabilitiesData(vulnerabilities=(Vulnerability(id="GHSA-1"),)))
        decision = STRICT.evaluate(raw)
        assert not decision.passed
        assert "GHSA-1" in decision.reason

    def test_rules_run_in_order(self, clean_raw):
        raw = _with(
            clean_raw,
            binary_artifacts=_binaries("tool.exe"),
            vulnerabilities=VulnerabilitiesData(vulnerabilities=(Vulnerability(id="GHSA-1"),)),
        )
        assert "binary detected" in STRICT.evaluate(raw).reason

    def test_unreviewed_changeset_fails(self, clean_raw):
        raw = _with(clean_raw, code_review=CodeReviewData(default_branch_changesets=(
            approved_changeset("c1"), unreviewed_changeset("c2"),
        )))
        decision = STRICT.evaluate(raw)
        assert not decision.passed
        assert "c2" in decision.reason

    def test_missing_data_for_enabled_rule_raises(self, now):
        with pytest.raises(ProbeExecutionError):
            STRICT.evaluate(RawResults(now=now))


class TestPinnedDependencies:

    def _raw(self, now, *deps):
        return RawResults(now=now, pinning_dependencies=PinningDependenciesData(dependencies=deps))

    def test_undefined_pinning_passes(self, now):
        raw = self._raw(now, Dependency(type=DependencyUseType.PIP_COMMAND, location=File(path="Dockerfile")))
        assert check_pinned_dependencies(raw).passed

    def test_github_owned_actions_checked_first(self, now):
        raw = self._raw(
            now,
            Dependency(type=DependencyUseType.PIP_COMMAND, name="requests",
                       location=File(path="Dockerfile"), pinned=False),
            action("build", False, owner="acme"),
            action("checkout", False),
        )
        decision = check_pinned_dependencies(raw)
        assert decision.result == PolicyResult.FAIL
        assert "GitHub-owned" in decision.reason
        assert "actions/checkout" in decision.reason

    def test_other_types_checked_after_actions(self, now):
        raw = self._raw(
            now,
            Dependency(type=DependencyUseType.PIP_COMMAND, name="requests",
                       location=File(path="Dockerfile", offset=3), pinned=False),
            action("checkout", True),
        )
        decision = check_pinned_dependencies(raw)
        assert "requests (pipCommand) at Dockerfile:3" in decision.reason


    def test_allowed_unpinned_by_package_name(self, now):
        raw = self._raw(
            now,
            Dependency(type=DependencyUseType.PIP_COMMAND, name="foo",
                       location=File(path="Dockerfile"), pinned=False),
            action("checkout", True),
        )
        assert not check_pinned_dependencies(raw).passed
        assert check_pinned_dependencies(raw, [AllowedDependency(package_name="foo")]).passed

    def test_allowed_unpinned_by_path_prefix(self, now):
        raw = self._raw(
            now,
            Dependency(type=DependencyUseType.NPM_COMMAND, name="left-pad",
                       location=File(path="tools/build/Dockerfile"), pinned=False),
            Dependency(type=DependencyUseType.PIP_COMMAND, name="requests",
                       location=File(path="Dockerfile"), pinned=False),
        )
        decision = check_pinned_dependencies(raw, [AllowedDependency(file_path="tools/")])
        assert not decision.passed
        assert "requests" in decision.reason

    def test_empty_allow_entry_matches_nothing(self, now):
        raw = self._raw(now, Dependency(type=DependencyUseType.PIP_COMMAND, name="foo",
                                        location=File(path="Dockerfile"), pinned=False))
        assert not check_pinned_dependencies(raw, [AllowedDependency()]).passed

    def test_policy_passes_allow_list_through(self, clean_raw):
        raw = _with(clean_raw, pinning_dependencies=PinningDependenciesData(dependencies=(
            action("build", False, owner="acme"),
        )))
        policy = AttestationPolicy(ensure_pinned_dependencies=True,
                                   allowed_unpinned_dependencies=(AllowedDependency(package_name="acme/build"),))
        assert policy.evaluate(raw).passed
        assert not STRICT.evaluate(raw).passed


class TestCodeReviewRequirements:

    def _raw(self, now, *changesets):
        return RawResults(now=now, code_review=CodeReviewData(default_branch_changesets=changesets))

    def _changeset(self, revision, *reviewers, author="alice"):
        return Changeset(revision_id=revision, author=User(login=author), reviews=tuple(
            Review(state="APPROVED", author=User(login=r)) for r in reviewers))

    def test_min_reviewers(self, now):
        raw = self._raw(now, self._changeset("c1", "bob", "carol"), self._changeset("c2", "bob", "bob"))
        decision = check_code_reviewed(raw, CodeReviewRequirements(min_reviewers=2))
        assert decision.result == PolicyResult.FAIL
        assert decision.reason == "not enough approvals for c2 (needed:2 found:1)"

    def test_author_approval_does_not_count(self, now):
        raw = self._raw(now, self._changeset("c1", "bob", "alice"))
        assert not check_code_reviewed(raw, CodeReviewRequirements(min_reviewers=2)).passed

    def test_required_approvers(self, now):
        raw = self._raw(now, self._changeset("c1", "bob"), self._changeset("c2", "carol"))
        reqs = CodeReviewRequirements(required_approvers=("bob", "dave"))
        decision = check_code_reviewed(raw, reqs)
        assert not decision.passed
        assert "c2" in decision.reason
        assert check_code_reviewed(raw, CodeReviewRequirements(required_approvers=("bob", "carol"))).passed

    def test_requirements_do_not_relax_code_review(self, now):
        raw = self._raw(now, self._changeset("c1", "bob"), self._changeset("c2"))
        assert not check_code_reviewed(raw, CodeReviewRequirements(min_reviewers=0)).passed

    def test_policy_applies_requirements(self, clean_raw):
        policy = AttestationPolicy(ensure_code_reviewed=True,
                                   code_review_requirements=CodeReviewRequirements(min_reviewers=2))
        assert not policy.evaluate(clean_raw).passed
        assert AttestationPolicy(ensure_code_reviewed=True).evaluate(clean_raw).passed


class TestLoadPolicy:

    def test_load(self, tmp_path):
        path = tmp_path / "policy.yml"
        path.write_text(
            "preventBinaryArtifacts: true\n"
            "allowedBinaryArtifacts:\n"
            "  - vendor/\n"
            "ensureNoVulnerabilities: true\n"
            "ensurePinnedDependencies: false\n"
            "ensureCodeReviewed: true\n"
        )
        policy = load_policy(path)
        assert policy == AttestationPolicy(
            prevent_binary_artifacts=True,
            allowed_binary_artifacts=("vendor/",),
            ensure_no_vulnerabilities=True,
            ensure_code_reviewed=True,
        )

    def test_empty_document_is_permissive(self):
        assert parse_policy(None) == AttestationPolicy()

    @pytest.mark.parametrize("document", [
        {"preventBinaries": True},
        {"preventBinaryArtifacts": "yes"},
        {"allowedBinaryArtifacts": "vendor/"},
        ["preventBinaryArtifacts"],
    ])
    def test_invalid_documents(self, document):
        with pytest.raises(PolicyLoadError):
            parse_policy(document)

    def test_load_allow_list_and_review_requirements(self):
        policy = parse_policy({
            "preventBinaryArtifacts": True,
            "allowedUnpinnedDependencies": [{"packagename": "foo"}, {"filepath": "tools/"}],
            "codeReviewRequirements": {"minReviewers": 2, "requiredApprovers": ["bob"]},
        })
        assert policy.prevent_binary_artifacts
        assert policy.allowed_unpinned_dependencies == (
            AllowedDependency(package_name="foo"),
            AllowedDependency(file_path="tools/"),
        )
        assert policy.code_review_requirements == CodeReviewRequirements(required_approvers=("bob",),
                                                                          min_reviewers=2)
        assert policy.to_dict()["codeReviewRequirements"] == {"requiredApprovers": ["bob"], "minReviewers": 2}

    @pytest.mark.parametrize("document", [
        {"allowedUnpinnedDependencies": {"packagename": "foo"}},
        {"allowedUnpinnedDependencies": [{"name": "foo"}]},
        {"allowedUnpinnedDependencies": [{}]},
        {"allowedUnpinnedDependencies": [{"packagename": 3}]},
        {"codeReviewRequirements": {"minReviewers": -1}},
        {"codeReviewRequirements": {"minReviewers": True}},
        {"codeReviewRequirements": {"requiredApprovers": "bob"}},
        {"codeReviewRequirements": {"reviewers": 2}},
    ])
    def test_invalid_allow_list_and_requirements(self, document):
        with pytest.raises(PolicyLoadError):
            parse_policy(document)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "policy.yml"
        path.write_text("preventBinaryArtifacts: [true\n")
        with pytest.raises(PolicyLoadError):
            load_policy(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(PolicyLoadError):
            load_policy(tmp_path / "missing.yml")

    def test_to_dict_uses_policy_keys(self):
        assert STRICT.to_dict()["ensureCodeReviewed"] is True
