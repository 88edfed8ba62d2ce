"""Command-line entry point for contact discovery."""
