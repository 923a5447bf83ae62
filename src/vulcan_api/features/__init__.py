"""Domain features: rules and memberships."""
