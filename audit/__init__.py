"""Runners and CLI for location audits."""
