"""Pipelines package."""
