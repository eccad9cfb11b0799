"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (HTTP download,
    archive extraction, filesystem, child processes, system packages and
    notification) used by use cases.

Dependencies:
    Individual submodules depend on ``requests``, the standard archive
    modules, ``subprocess`` and domain protocol definitions.

Call context:
    Imported by ``ssui.usecases.ensure_updater`` and ``ssui.app.main`` for
    runtime wiring, and by tests for transport-level behavior verification.
"""
