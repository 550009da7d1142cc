"""Federated scripture search orchestration."""

__version__ = "0.1.0"
