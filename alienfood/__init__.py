"""Alien Food Push - Web Push notifications for the Tunel del Tiempo storefront

Components:
    client/: Browser-side subscription lifecycle (permission, VAPID key,
             subscribe/unsubscribe, cleanup of stale subscriptions)
    worker/: Service worker delivery handler (push + notification click)
    push/: Server-side VAPID keys, subscription store, pending queue, sender
    backend/: FastAPI application exposing /push/* and /admin/* routes

Database: data/push.db
    - push_subscriptions: One Web Push endpoint per user
    - pending_notifications: Payloads waiting for a user to (re)subscribe
    - notifications: Notification history shown in the storefront
"""

import sqlite3
from pathlib import Path


# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "args"
DATA_PATH = PROJECT_ROOT / "data"
DB_PATH = DATA_PATH / "push.db"


def get_connection() -> sqlite3.Connection:
    """
    Get database connection, creating tables if needed.

    Returns:
        SQLite connection with row_factory set
    """
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS push_subscriptions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            username TEXT,
            endpoint TEXT NOT NULL UNIQUE,
            p256dh_key TEXT NOT NULL,
            auth_key TEXT NOT NULL,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS pending_notifications (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            payload TEXT NOT NULL,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            body TEXT,
            icon TEXT,
            data TEXT,
            tag TEXT,
            read BOOLEAN DEFAULT FALSE,
            read_at DATETIME,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_subscriptions_user "
        "ON push_subscriptions(user_id)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_pending_user "
        "ON pending_notifications(user_id, created_at)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_notifications_user "
        "ON notifications(user_id, created_at)"
    )

    conn.commit()
    return conn
