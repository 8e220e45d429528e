"""Object context layer.

This package stages record changes and reconciles store identifiers.
It evaluates filters and sorts the store hands back to the caller.
"""
