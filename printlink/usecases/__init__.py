"""Use-case layer for printer operations.

Each module binds one operation to a ``TransportRouter`` and returns a
``Future`` so callers on a UI tick never block on network I/O.
"""
