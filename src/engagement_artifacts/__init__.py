"""Engagement artifacts: reconciliation between a document store and git snapshots."""
