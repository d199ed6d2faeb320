"""Find Steam users and games, reuse local artwork, draw category overlays and save grid images."""

__version__ = "1.0.0"