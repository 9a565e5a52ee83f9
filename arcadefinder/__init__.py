"""Arcade Finder: discover and review arcades."""
