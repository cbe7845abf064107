"""SQLAlchemy ORM models for the users and navigation site tables."""
