"""
Core application utilities shared by every layer.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with per-request context
- Domain error kinds and storage-error classification
- Credential hashing, token issuance/validation and identity extraction
- FastAPI dependency helpers (session, auth services, current identity)
"""
