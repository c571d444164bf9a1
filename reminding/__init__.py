"""
reminding
=========
Subscription tracking core: billing cycles, renewal-date generation and
calendar queries over a set of stored subscriptions.
"""

__version__ = "0.3.0"
