"""
Snapshot persistence — day-keyed games files, manifest, retention, and backfill.

Submodules:
  paths     — Storage root layout and atomic write helper
  manifest  — Manifest model and tolerant load / atomic write
  writer    — Snapshot writes, manifest refresh, retention pruning
  store     — Read access to persisted snapshots
  sync      — Single-pass backfill over a rolling date window
"""
