"""
Core application utilities for settings, sessions and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- The session cache and session/profile resolution
- Dependency helpers (request context, repositories, auth guards)
"""
