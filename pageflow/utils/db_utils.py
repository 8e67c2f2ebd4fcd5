"""Helpers for database connection strings.

Deployments hand us SQLAlchemy-style or libpq-style PostgreSQL URLs, while
Tortoise ORM wants the ``asyncpg://`` scheme. SQLite URLs (used by the test
suite) are passed through untouched.
"""

from __future__ import annotations


def to_tortoise_url(url: str) -> str:
    """Normalize a database URL into the form Tortoise ORM expects."""

    url = url.strip()
    if url.startswith("sqlite://"):
        return url
    if url.startswith("postgresql+"):
        url = "postgresql://" + url.split("://", 1)[1]
    if url.startswith("postgresql://"):
        return "asyncpg://" + url[len("postgresql://") :]
    if url.startswith("postgres://"):
        return "asyncpg://" + url[len("postgres://") :]
    return url


def redact_url(url: str) -> str:
    """Hide the password part of a DSN before it reaches the logs."""

    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"
