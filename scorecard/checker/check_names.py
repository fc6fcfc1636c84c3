"""
Check Names
===========
Registered check names and their risk levels.

Author: Scorecard Team
"""

from enum import Enum

BINARY_ARTIFACTS = "Binary-Artifacts"
BRANCH_PROTECTION = "Branch-Protection"
CI_TESTS = "CI-Tests"
CII_BEST_PRACTICES = "CII-Best-Practices"
CODE_REVIEW = "Code-Review"
CONTRIBUTORS = "Contributors"
DANGEROUS_WORKFLOW = "Dangerous-Workflow"
DEPENDENCY_UPDATE_TOOL = "Dependency-Update-Tool"
FUZZING = "Fuzzing"
INACTIVE_MAINTAINERS = "Inactive-Maintainers"
LICENSE = "License"
MAINTAINED = "Maintained"
MAINTAINER_RESPONSE = "Maintainer-Response"
MTTU_DEPENDENCIES = "MTTUDependencies"
PACKAGING = "Packaging"
PINNED_DEPENDENCIES = "Pinned-Dependencies"
SAST = "SAST"
SECRET_SCANNING = "Secret-Scanning"
SECURITY_POLICY = "Security-Policy"
SIGNED_RELEASES = "Signed-Releases"
TAG_PROTECTION = "Tag-Protection"
TOKEN_PERMISSIONS = "Token-Permissions"
VULNERABILITIES = "Vulnerabilities"
WEBHOOKS = "Webhooks"


class Risk(Enum):
    """Check risk level and its weight in the aggregate score."""
    CRITICAL = 10.0
    HIGH = 7.5
    MEDIUM = 5.0
    LOW = 2.5


CHECK_RISK = {
    BINARY_ARTIFACTS: Risk.HIGH,
    BRANCH_PROTECTION: Risk.HIGH,
    CI_TESTS: Risk.LOW,
    CII_BEST_PRACTICES: Risk.LOW,
    CODE_REVIEW: Risk.HIGH,
    CONTRIBUTORS: Risk.LOW,
    DANGEROUS_WORKFLOW: Risk.CRITICAL,
    DEPENDENCY_UPDATE_TOOL: Risk.HIGH,
    FUZZING: Risk.MEDIUM,
    INACTIVE_MAINTAINERS: Risk.MEDIUM,
    LICENSE: Risk.LOW,
    MAINTAINED: Risk.HIGH,
    MAINTAINER_RESPONSE: Risk.MEDIUM,
    MTTU_DEPENDENCIES: Risk.MEDIUM,
    PACKAGING: Risk.MEDIUM,
    PINNED_DEPENDENCIES: Risk.MEDIUM,
    SAST: Risk.MEDIUM,
    SECRET_SCANNING: Risk.HIGH,
    SECURITY_POLICY: Risk.MEDIUM,
    SIGNED_RELEASES: Risk.HIGH,
    TAG_PROTECTION: Risk.HIGH,
    TOKEN_PERMISSIONS: Risk.HIGH,
    VULNERABILITIES: Risk.HIGH,
    WEBHOOKS: Risk.CRITICAL,
}
