"""Route-to-permission mapping and authorization for API tokens."""

__version__ = "0.1.0"
