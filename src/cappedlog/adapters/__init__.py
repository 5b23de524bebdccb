"""Adapters connecting the core to stores and to the logging module."""
