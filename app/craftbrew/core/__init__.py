"""Reconciliation engine: loading, probing, diffing, planning and execution."""
