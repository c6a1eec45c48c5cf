"""Command-line interface for taskvault."""
