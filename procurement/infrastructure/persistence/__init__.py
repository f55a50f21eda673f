"""Persistence: database engine, ORM models, repositories, unit of work."""
