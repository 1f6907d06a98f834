"""Find a networked 3D printer on the local subnet and route requests to it."""

__version__ = "0.1.0"
