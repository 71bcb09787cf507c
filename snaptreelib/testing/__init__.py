"""Testing utilities for SnapTreeLib consumers."""

from .fixtures import TreeFixtureBuilder

__all__ = ['TreeFixtureBuilder']
