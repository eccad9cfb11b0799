"""Application composition layer for the companion CLI.

Modules here load settings, configure logging and wire adapters into the
use-case pipeline without placing pipeline logic in the entrypoint.
"""
