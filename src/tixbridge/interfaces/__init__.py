"""Outer interfaces: HTTP API and CLI."""
