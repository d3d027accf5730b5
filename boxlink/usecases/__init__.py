
"""Use-case layer for panel workflows.

Each module coordinates domain objects and the list-store port without
performing transport I/O directly, preserving MVVM + Hexagonal boundaries.
"""
