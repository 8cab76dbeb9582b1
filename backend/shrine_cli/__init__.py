"""Command line tools for the Shrine API."""
