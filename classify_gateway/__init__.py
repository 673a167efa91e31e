"""HTTP front end for an external image classifier executable."""

__version__ = "1.0.0"
