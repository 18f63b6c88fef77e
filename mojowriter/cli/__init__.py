"""Command line interface for Mojo Writer."""
