"""Command execution, retry and git checkout engine."""
