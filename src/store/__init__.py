"""Record store layer.

This package persists task snapshots in a JSON backing file.
It implements the fetch/save contract consumed by the object context.
"""
