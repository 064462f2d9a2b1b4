"""Standalone job entrypoints for cron or one-off runs."""
