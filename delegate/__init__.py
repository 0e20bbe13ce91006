"""Delegate: autonomous orchestration for timed Model UN campaigns."""

__version__ = "0.1.0"
