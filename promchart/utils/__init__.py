"""Shared helpers: timestamps, caching, correlation ids and timers."""
