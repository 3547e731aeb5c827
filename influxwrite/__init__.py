"""Batched, retrying line-protocol writing for InfluxDB 2: options, write service, retry queue, gzip and logging."""

__version__ = "2.14.0"