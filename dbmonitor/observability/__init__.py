"""Logging and metrics for dbmonitor."""
