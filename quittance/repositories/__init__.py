"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area. Collection
queries over owned resources are filtered with
quittance.services.ownership.visible_to; single-row access checks are left to
the services.
"""
