"""Errors, logging, caching and configuration for ntfsmft."""
