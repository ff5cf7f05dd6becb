"""Domain layer for gigbook application.

Use cases live in the submodules (event, transaction, summary, report,
settings, backup) and are imported from there directly.
"""
