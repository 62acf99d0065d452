"""Orchestra command-line interface."""
