"""
API route modules.

This package contains subrouters for:
- Auth: register, login and current identity
- Organizations: organization CRUD and membership management
- Properties, Tenants, Leases, Receipts: the rental domain

Routers are included from quittance.api.main (under the /api/v1 prefix).
"""
