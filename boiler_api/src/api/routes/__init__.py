"""
API route modules.

This package contains subrouters for:
- Auth: credentials login, logout and current session
- Priorities: priority CRUD (writes require an admin profile)
- Todos: todo CRUD

Routers are included from src.api.main (under the /api/v1 prefix).
"""
