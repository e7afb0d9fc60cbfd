"""Command-line entrypoints for swap_quote."""
