"""
Resume Storage - file storage backend for a resume builder.

This package contains the complete application:
- core: Object naming, image resizing and the storage service
- infrastructure: Object store clients (S3-compatible and in-memory)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
