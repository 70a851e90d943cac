"""Persistence backends for projreview."""
