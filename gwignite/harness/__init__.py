"""Thin I/O drivers around the step pipeline."""
