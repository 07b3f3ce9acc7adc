"""Strength-training program tracker with automatic load progression."""

__version__ = "0.1.0"
