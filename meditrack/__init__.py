"""Meditrack - personal meditation session tracker."""

__version__ = "0.1.0"
