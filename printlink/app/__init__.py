"""Application layer: tick scheduling, connectivity controller and CLI wiring."""
