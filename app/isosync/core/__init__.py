"""Reconciliation core: scanning, manifest building, diffing and writing."""
