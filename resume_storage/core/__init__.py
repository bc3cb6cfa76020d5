"""
Core domain logic - framework-agnostic.

Nothing in this package imports FastAPI or reads settings.
"""
