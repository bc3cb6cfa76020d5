"""
Infrastructure layer - external service integrations.

- storage: Object storage (S3/R2/MinIO) plus an in-memory mock

These wrappers translate between SDK calls and what the domain needs.
"""
