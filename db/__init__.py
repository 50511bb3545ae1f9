"""
Repo-level database helpers for local development.

Runtime DB access lives in services/floorplan. This package only bootstraps the
seat/room tables and fills them with a deterministic sample layout.
"""
