"""Release Cargo workspaces crate by crate, in dependency order."""
