"""Workspace consistency checks that must pass before anything is published.

ConsistencyValidator runs four independent checks:
1. Every publish candidate allows the target registry
2. The pending version is higher than the last published root version
3. In-workspace dev-dependencies are path-only (no version requirement)
4. Every candidate has the pending version and its in-workspace
   requirements accept it

All checks run and print their diagnostics before the validator fails, so a
single run reports every problem at once.
"""

from __future__ import annotations

import semver
from pydantic import BaseModel, Field

from .cargo import query_last_released_version
from .errors import ConfigError, ValidationError
from .graph import packages_to_publish
from .models import CRATES_IO_REGISTRY_NAME, DependencyKind
from .state import ReleaseState
from .versions import VersionReq, parse_version


class ValidationReport(BaseModel):
    """Outcome of a validation run.

    Attributes:
        registry_violations: Candidates that may not be published to the
                             target registry.
        version_raised: True/False for the version-raise check, None when
                        the check was skipped.
        previous_version: Last published root version, None if not found or
                          not queried.
        invalid_dev_dependencies: (package, dependency) pairs where an
                                  in-workspace dev-dependency has a version
                                  requirement.
        inconsistent_packages: Candidates with a wrong version or an
                               in-workspace requirement that rejects the
                               pending version.
        failures: One message per failed check.
    """

    registry_violations: list[str] = Field(default_factory=list)
    version_raised: bool | None = None
    previous_version: str | None = None
    invalid_dev_dependencies: list[tuple[str, str]] = Field(default_factory=list)
    inconsistent_packages: list[str] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ConsistencyValidator:
    def __init__(self, state: ReleaseState) -> None:
        self.state = state
        self.release_config = state.config.release

    def validate(self) -> ValidationReport:
        """Run every check, then fail if any of them did.

        Raises:
            ValidationError: If at least one check failed. The report is
                             attached to the exception.
            ConfigError: If the version-raise check is enabled for a custom
                         registry.
        """
        version = self.state.require_version()
        report = ValidationReport()

        report.registry_violations = self.check_registry_consistency()
        if report.registry_violations:
            report.failures.append("Package registry inconsistency detected")

        report.version_raised = self.check_version_raised(version)
        if self.state.previous_version is not None:
            report.previous_version = str(self.state.previous_version)
        if report.version_raised is False:
            report.failures.append(
                "Pending version is lower or equal to already published version"
            )

        report.invalid_dev_dependencies = self.check_dev_dependencies()
        if report.invalid_dev_dependencies:
            report.failures.append(
                "Detected invalid dev dependencies: version field should not be "
                "specified for in-workspace dev-dependencies"
            )

        report.inconsistent_packages = self.check_version_consistency(version)
        if report.inconsistent_packages:
            report.failures.append("Detected version inconsistency in crates")

        if not report.ok:
            raise ValidationError("\n".join(report.failures), report)
        return report

    def check_registry_consistency(self) -> list[str]:
        print("  Checking package registry consistency...")
        registry = self.release_config.registry
        registry_name = registry or CRATES_IO_REGISTRY_NAME
        violations: list[str] = []
        for package in packages_to_publish(self.state.require_workspace()):
            if not package.allows_registry(registry):
                print(
                    f"  ✗ {package.full_name} does not allow publish "
                    f"to `{registry_name}` registry"
                )
                violations.append(package.name)
        return violations

    def check_version_raised(self, version: semver.Version) -> bool | None:
        """Compare against the last published version of the root package.

        Returns:
            None if the check is disabled, otherwise whether the pending
            version is strictly greater. A root package that was never
            published passes.
        """
        if not self.release_config.check_version_raised:
            print("  Version raise check was skipped")
            return None
        if self.release_config.registry is not None:
            raise ConfigError(
                "Querying last released version is not yet supported for custom "
                "registries"
            )

        print("  Checking that version has been raised...")
        previous = query_last_released_version(self.state.root_package_name)
        self.state.record_previous_version(previous)
        if previous is None:
            print("  WARN: Previously published root crate not found")
            return True

        print(f"  Queried previous crate version: {previous}")
        if version <= previous:
            print(f"  ✗ Pending version {version} is not greater than {previous}")
            return False
        return True

    def check_dev_dependencies(self) -> list[tuple[str, str]]:
        if self.release_config.allow_non_path_dev_dependencies:
            return []

        print("  Checking crate workspace dev-dependencies...")
        workspace = self.state.require_workspace()
        workspace_names = set(workspace.package_names())
        invalid: list[tuple[str, str]] = []
        for package in packages_to_publish(workspace):
            broken = [
                dep.name
                for dep in package.dependencies
                if dep.kind == DependencyKind.DEVELOPMENT
                and dep.name in workspace_names
                and not dep.has_empty_req
            ]
            if broken:
                print(
                    f"  ✗ {package.full_name} has invalid dev-dependencies "
                    f"({', '.join(broken)})"
                )
                invalid.extend((package.name, name) for name in broken)
        return invalid

    def check_version_consistency(self, version: semver.Version) -> list[str]:
        print("  Checking for crates version consistency...")
        workspace = self.state.require_workspace()
        workspace_names = set(workspace.package_names())
        inconsistent: list[str] = []

        for package in packages_to_publish(workspace):
            if parse_version(package.version) != version:
                print(f"  ✗ {package.full_name} has inconsistent version")
                inconsistent.append(package.name)
                continue

            bad_deps = [
                f"{dep.name} {dep.req}"
                for dep in package.dependencies
                if dep.kind != DependencyKind.DEVELOPMENT
                and dep.name in workspace_names
                and not _req_matches(dep.req, version)
            ]
            if bad_deps:
                print(
                    f"  ✗ {package.full_name} has inconsistent monorepo "
                    f"dependencies ({', '.join(bad_deps)})"
                )
                inconsistent.append(package.name)
                continue

            print(f"  ✓ {package.full_name} is OK")

        return inconsistent


def _req_matches(req: str, version: semver.Version) -> bool:
    try:
        return VersionReq.parse(req).matches(version)
    except ValueError:
        return False
