"""
Centralized logging.

Stdlib logging, configured in one place for the whole app. Never log passwords,
password hashes or bearer tokens; user ids and session ids are fine.
"""

from __future__ import annotations

import logging
from functools import lru_cache


@lru_cache
def initialize_logger() -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=logging.INFO,
    )
    return logging.getLogger("gameplan")


logger = initialize_logger()
