"""Utility helpers for shell execution, console output and logging."""
