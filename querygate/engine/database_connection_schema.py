import re
from enum import Enum


class DatabaseType(Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    UNKNOWN = "unknown"


# Checked in order, first match wins
SCHEME_PREFIXES = [
    (("postgres://", "postgresql://"), DatabaseType.POSTGRESQL),
    (("mysql://",), DatabaseType.MYSQL),
    (("mongodb://", "mongodb+srv://"), DatabaseType.MONGODB),
]

SQL_DATABASE_TYPES = [DatabaseType.POSTGRESQL, DatabaseType.MYSQL]


def classify_database_url(database_url: str) -> DatabaseType:
    """Infer the database engine from the connection string's scheme prefix.

    Matching is case-sensitive and does not look past the prefix.
    """
    for prefixes, db_type in SCHEME_PREFIXES:
        if database_url.startswith(prefixes):
            return db_type
    return DatabaseType.UNKNOWN


def sanitize_url(database_url: str) -> str:
    """Mask credentials in a connection string before it is logged."""
    return re.sub(r"://([^@/]+)@", "://***:***@", database_url)
