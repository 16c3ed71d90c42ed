"""shellup CLI Commands - Subcommand implementations."""
