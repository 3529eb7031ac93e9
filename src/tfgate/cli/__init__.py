"""tfgate command-line interface."""
