"""
services/ - Business Logic Layer
================================
Renewal-date arithmetic, calendar queries and subscription management.
Services receive their record store explicitly and hold no state between calls.
"""
