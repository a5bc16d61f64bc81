"""
Shared repository helpers.
"""
import logging
import re
from contextlib import contextmanager

import asyncpg

from ..exceptions import StoreError

logger = logging.getLogger(__name__)

# Errors that mean the store itself failed (as opposed to "not found")
STORE_FAILURES = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

IDENTIFIER_PATTERN = re.compile(r'^[a-z_][a-z0-9_]{0,62}$')


def validate_identifier(name: str) -> str:
    """Schema names are interpolated into SQL, so only allow plain identifiers."""
    if not IDENTIFIER_PATTERN.match(name or ''):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


@contextmanager
def store_errors(operation: str, key: object):
    """Wrap store failures in StoreError, tagged with the affected key."""
    try:
        yield
    except STORE_FAILURES as e:
        logger.error(f"Store {operation} failed for {key!r}: {e}")
        raise StoreError(operation, key, str(e)) from e
