"""
Service layer: business rules and access checks on top of the repositories.
"""
