"""Use-case layer for the updater install-and-update pipeline.

Each module coordinates domain objects and ports without performing
transport I/O directly.
"""
