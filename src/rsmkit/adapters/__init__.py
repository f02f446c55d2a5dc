"""Adapters binding the reconciliation core to concrete cluster stores."""
