"""Typer sub-applications for the orchestra CLI."""
