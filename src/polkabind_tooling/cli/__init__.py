"""Command-line interface (`polkabind`)."""
