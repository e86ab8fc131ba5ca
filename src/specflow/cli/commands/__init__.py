"""specflow CLI subcommands."""
