"""Shared libraries used across svgworks applications."""
