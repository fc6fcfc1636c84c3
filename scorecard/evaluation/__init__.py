"""
Check Evaluations
=================
One evaluation function per check. Each takes the check name and the
findings of its probes and folds them into a CheckResult.

Author: Scorecard Team
"""

from typing import Callable, Dict, List

from scorecard.checker import check_names as checks
from scorecard.checker.check_result import CheckResult
from scorecard.evaluation.best_practices import best_practices
from scorecard.evaluation.binary_artifacts import binary_artifacts
from scorecard.evaluation.branch_protection import branch_protection
from scorecard.evaluation.ci_tests import ci_tests
from scorecard.evaluation.code_review import code_review
from scorecard.evaluation.contributors import contributors
from scorecard.evaluation.dangerous_workflow import dangerous_workflow
from scorecard.evaluation.license import license
from scorecard.evaluation.maintained import maintained
from scorecard.evaluation.maintainers import inactive_maintainers, maintainer_response, mttu_dependencies
from scorecard.evaluation.packaging import packaging
from scorecard.evaluation.pinned_dependencies import pinned_dependencies
from scorecard.evaluation.sast import sast
from scorecard.evaluation.secret_scanning import secret_scanning
from scorecard.evaluation.security_policy import security_policy
from scorecard.evaluation.signed_releases import signed_releases
from scorecard.evaluation.tag_protection import tag_protection
from scorecard.evaluation.token_permissions import token_permissions
from scorecard.evaluation.tooling import dependency_update_tool, fuzzing
from scorecard.evaluation.vulnerabilities import vulnerabilities
from scorecard.evaluation.webhooks import webhooks
from scorecard.finding.finding import Finding

Evaluator = Callable[[str, List[Finding]], CheckResult]

EVALUATORS: Dict[str, Evaluator] = {
    checks.BINARY_ARTIFACTS: binary_artifacts,
    checks.BRANCH_PROTECTION: branch_protection,
    checks.CI_TESTS: ci_tests,
    checks.CII_BEST_PRACTICES: best_practices,
    checks.CODE_REVIEW: code_review,
    checks.CONTRIBUTORS: contributors,
    checks.DANGEROUS_WORKFLOW: dangerous_workflow,
    checks.DEPENDENCY_UPDATE_TOOL: dependency_update_tool,
    checks.FUZZING: fuzzing,
    checks.INACTIVE_MAINTAINERS: inactive_maintainers,
    checks.LICENSE: license,
    checks.MAINTAINED: maintained,
    checks.MAINTAINER_RESPONSE: maintainer_response,
    checks.MTTU_DEPENDENCIES: mttu_dependencies,
    checks.PACKAGING: packaging,
    checks.PINNED_DEPENDENCIES: pinned_dependencies,
    checks.SAST: sast,
    checks.SECRET_SCANNING: secret_scanning,
    checks.SECURITY_POLICY: security_policy,
    checks.SIGNED_RELEASES: signed_releases,
    checks.TAG_PROTECTION: tag_protection,
    checks.TOKEN_PERMISSIONS: token_permissions,
    checks.VULNERABILITIES: vulnerabilities,
    checks.WEBHOOKS: webhooks,
}

__all__ = ['EVALUATORS', 'Evaluator']
