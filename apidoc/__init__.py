"""Swagger 1.2 documentation generated by introspecting Starlette applications."""

from .utils.env import load_env

# Ensure environment defaults from `.env` are available to all modules on import.
load_env()
