"""Publish workspace packages to the registry in dependency order."""

from __future__ import annotations

import time

from .cargo import cargo_publish
from .errors import ExternalError
from .models import Package


def publish_packages(
    packages: list[Package],
    *,
    registry: str | None,
    validate_only: bool,
    interval_seconds: int,
    token: str | None = None,
) -> list[str]:
    """Dry-run or really publish ``packages`` one after another.

    In validation mode every package goes through ``cargo publish --dry-run``
    except binary packages, which are skipped with a warning. In real mode
    the driver waits ``interval_seconds`` between publishes so the registry
    index catches up with the previous upload. The first failure stops the
    run; packages already published stay published.

    Args:
        packages: Packages in publish order.
        registry: Target registry, None for crates.io.
        validate_only: Run the dry-run validation instead of publishing.
        interval_seconds: Delay between two real publishes.
        token: Registry token passed to cargo.

    Returns:
        Names of the packages that were validated or published.

    Raises:
        ExternalError: If cargo publish fails for a package.
    """
    processed: list[str] = []

    if validate_only:
        for p in packages:
            if p.is_binary:
                print(f"  WARN: Skipped validation of bin crate {p.name}")
                continue
            print(f"  Validating {p.name}...")
            if not cargo_publish(p.manifest_path, registry, dry_run=True, token=token):
                raise ExternalError(f"Cargo publish validation failed for {p.name}")
            print(f"  ✓ {p.name} has been successfully validated")
            processed.append(p.name)
        return processed

    for p in packages:
        if processed:
            print(f"  Waiting for {interval_seconds} seconds before publishing next crate...")
            time.sleep(interval_seconds)
        print(f"  Publishing {p.name}...")
        if not cargo_publish(p.manifest_path, registry, dry_run=False, token=token):
            raise ExternalError(f"Cargo publish failed for {p.name}")
        print(f"  ✓ {p.name} has been successfully published")
        processed.append(p.name)
    return processed
