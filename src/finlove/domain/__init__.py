"""Domain layer for finlove application.

Services live in their own modules (``finlove.domain.transaction`` and so
on) and are imported from there; this package only groups them.
"""
