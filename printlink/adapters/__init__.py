"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the ``Transport`` port (local-network
    discovery), the transport router, the shared HTTPS session and local
    settings storage.

Dependencies:
    Network submodules depend on ``requests``; storage uses the filesystem.

Call context:
    Imported by the app composition root (runtime wiring) and by tests.
"""
