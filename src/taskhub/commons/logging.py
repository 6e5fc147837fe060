"""
Centralized logging.

One place to configure stdlib logging for the whole app. Modules import
`logger` from here instead of calling `logging.getLogger` ad hoc.
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
    return logging.getLogger("taskhub")


logger = initialize_logger()
