"""Helpers for environment-backed configuration loading."""

from .dotenv_loader import DotenvLoader

__all__ = ["DotenvLoader"]
