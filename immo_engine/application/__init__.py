"""Multi-year orchestration services."""
