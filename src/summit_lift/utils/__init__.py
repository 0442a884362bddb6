"""Utility functions for summit-lift."""
