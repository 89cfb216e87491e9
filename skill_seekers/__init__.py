"""Skill Seekers: build AI assistant skill packages from documentation sources."""

__version__ = "0.1.0"
