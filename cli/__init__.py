"""Command line interface for ABCDNet."""
