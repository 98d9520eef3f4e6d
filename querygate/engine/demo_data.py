"""Canned rows returned by the proxy in demo mode."""
import copy
from typing import Any, Dict, List

from querygate.engine.database_connection_schema import DatabaseType

DEMO_MESSAGE = "Demo mode: Returning sample data. Install database drivers for real queries."

# Records mix the identifier fields Telegram exports carry
SAMPLE_ROWS: List[Dict[str, Any]] = [
    {"id": 123456789, "name": "User 1", "active": True, "created_at": "2025-01-01"},
    {"id": 987654321, "name": "User 2", "active": True, "created_at": "2025-01-02"},
    {"message_id": 555666777, "chat_id": 111222333, "text": "Sample message"},
    {"user_id": 444555666, "email": "user@example.com", "status": "active"},
    {"id": 777888999, "chat_id": 222333444, "type": "group"},
    {"id": 100200300, "name": "Channel 1", "subscriber_count": 1500},
    {"message_id": 999888777, "from_id": 666555444, "date": "2025-11-07"},
    {"id": 333222111, "username": "testuser", "verified": True},
]


def get_demo_rows(db_type: DatabaseType) -> List[Dict[str, Any]]:
    """Return a fresh copy of the sample rows.

    The same set is served for every engine type, including unknown ones.
    """
    return copy.deepcopy(SAMPLE_ROWS)
