"""
csvseeder - Centralised configuration.

Defaults for the CLI. Every value can be overridden from the environment,
and again from the command line.
"""

import os

# ── Database ───────────────────────────────────────────────────────────
DB_URL    = os.environ.get("CSVSEEDER_DB_URL", "sqlite:///seed.db")
POOL_SIZE = int(os.environ.get("CSVSEEDER_POOL_SIZE", "4"))

# ── CSV ────────────────────────────────────────────────────────────────
CHUNK_SIZE = int(os.environ.get("CSVSEEDER_CHUNK_SIZE", "50"))
DELIMITER  = os.environ.get("CSVSEEDER_DELIMITER", ",")
ENCODING   = os.environ.get("CSVSEEDER_ENCODING", "utf-8")

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL  = os.environ.get("CSVSEEDER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
