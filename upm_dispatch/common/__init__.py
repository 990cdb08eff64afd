"""Helpers shared across dispatcher packages."""
