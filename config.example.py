# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKMATE_APP_NAME": "App display name (default: taskmate).",
    "TASKMATE_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TASKMATE_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Storage
    "TASKMATE_STORAGE": "Task storage backend: sqlite | memory (default: sqlite).",
    "TASKMATE_DATA_DIR": "Local data directory (default: .local/taskmate).",
    "TASKMATE_TASKS_DB_PATH": "SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Notifications
    "TASKMATE_NOTIFICATIONS_AUTHORIZED": "Grant notification permission at startup (default: true).",
    "TASKMATE_NOTIFICATION_POLL_SECONDS": "How often due reminders are checked (default: 1.0).",
}
