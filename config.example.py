# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "ST_APP_NAME": "App display name (default: spacetraders).",
    "ST_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "ST_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Scheduler
    "ST_POLL_INTERVAL_SECONDS": "How often due refreshes are checked (default: 0.5).",
    # Paths (gitignored)
    "ST_DATA_DIR": "Local data directory for logs (default: .local/spacetraders).",
}
