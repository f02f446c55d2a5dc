"""Reconciliation core for replicated workloads."""
