# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for anything sensitive. This file should contain only safe overrides.
"""

# Example: run the poll driver headless
# CONSOLE_ENABLED = False

# Example: check for due refreshes more often while debugging
# POLL_INTERVAL_SECONDS = 0.1
