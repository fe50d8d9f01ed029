"""Command line interface for redis-cloud-backup."""

from .dispatcher import main

__all__ = ["main"]
