"""State/store layer.

The city store is the single source of truth for loaded cities, derived
filter options and the current filter selection.
"""
