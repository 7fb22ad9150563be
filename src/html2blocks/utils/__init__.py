"""Utility helpers shared by the converter, media store and CLI."""
