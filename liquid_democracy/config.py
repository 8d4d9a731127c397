"""Core application configuration & tunable tally rules.

Everything that may need adjusting without touching service logic (output
formatting, pagination bounds, import limits, storage location) is kept here
as module constants. Deployments override the environment-backed values;
tests monkeypatch the dicts where needed.
"""
from __future__ import annotations

import os

# Storage for persisted polls. Default is a local sqlite file next to the CWD.
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./liquid_democracy.db")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
# The CLI shares stderr with its user-facing warnings; keep it quiet by default.
CLI_LOG_LEVEL: str = os.getenv("CLI_LOG_LEVEL", "WARNING").upper()
# Optional JSON log file; console only when unset.
LOG_FILE: str | None = os.getenv("LOG_FILE") or None

CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

SERVICE_NAME: str = "liquid-democracy"
SERVICE_VERSION: str = "0.1.0"

# --------------------------------- Tally ---------------------------------- #
TALLY_SETTINGS: dict[str, str] = {
	# "<count> <label>" line used for every results row (count right aligned).
	"result_line_format": "    %4d %s\n",
	# Label of the trailing invalid-votes row.
	"invalid_label": "Invalid",
	"open_vote_header": "\nOpen Votes:\n",
	"open_vote_line_format": "    %-15s -->  %15s\n",
	"open_invalid_line_format": "  ! %-15s %21s\n",
	"open_invalid_marker": "(invalid choice)",
	"no_results": "No results!\n",
}

# ---------------------------------- API ----------------------------------- #
API_SETTINGS: dict[str, int] = {
	"default_page_size": 100,
	"max_page_size": 1000,
	# Upper bound of lines accepted by a single command import request.
	"max_import_lines": 10000,
}

__all__ = [
	"DATABASE_URL",
	"LOG_LEVEL",
	"CLI_LOG_LEVEL",
	"LOG_FILE",
	"CORS_ORIGINS",
	"SERVICE_NAME",
	"SERVICE_VERSION",
	"TALLY_SETTINGS",
	"API_SETTINGS",
]
