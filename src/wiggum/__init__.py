"""Wiggum: session state and enforcement for autonomous implementation loops."""

__version__ = "0.1.0"
