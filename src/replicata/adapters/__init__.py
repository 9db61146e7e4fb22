"""Persistence adapters for Replicata."""
