"""summit-lift: personal workout plans, sessions and progress tracking."""

__version__ = "0.1.0"
