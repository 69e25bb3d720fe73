"""Weekly meal-prep recipe service."""

__version__ = "0.1.0"
