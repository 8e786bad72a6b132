"""Operator CLI for the observability core."""
