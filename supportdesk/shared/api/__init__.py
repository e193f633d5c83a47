"""Shared HTTP middleware and error mapping."""
