"""Persistence layer: SQLAlchemy engine, ORM models and SQL-backed stores."""
