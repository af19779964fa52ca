"""Command-line interface for the codepush tool."""
