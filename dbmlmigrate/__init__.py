"""Parse DBML diagrams, validate them and write SeaORM migration files."""

__version__ = "0.8.0"