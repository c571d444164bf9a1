"""
utils/ - Shared Helpers
=======================
Logging setup and calendar-date helpers used across all layers.
"""
