"""Use-case layer for session, note, and token workflows.

Each module coordinates domain objects and the gateway without performing
transport I/O directly, preserving MVVM + Hexagonal boundaries.
"""
