"""Adapters: in-memory implementations of the core ports."""
