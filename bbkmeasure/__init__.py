"""Broadband speed measurement: JSON values and parsing, speed and latency arithmetic, progress tracking and agent helpers."""

__version__ = "1.2.1"