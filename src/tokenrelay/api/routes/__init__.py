"""Auxiliary routes (health)."""
