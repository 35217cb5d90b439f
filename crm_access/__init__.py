"""
CRM Access - permission resolution for the CRM backend

Resolves the effective permissions of a user by combining:
- Fixed roles (SUPERADMIN, ADMIN, MANAGER, SALES) compiled into the app
- Custom roles administered at runtime and stored in the database
- A short-lived per-user cache of resolved permission sets
- Row-level data scopes derived from the fixed role
"""

__version__ = "1.0.0"
