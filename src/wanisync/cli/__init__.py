"""Command line interface for WaniSync."""
