"""User-facing interfaces for sandoc."""
