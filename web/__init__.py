"""Operator web API."""
