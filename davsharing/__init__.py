#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .collection import AsyncAddressBook, AsyncCalendar
from .davclient import AsyncDAVClient, get_davclient
from .shareable import ShareableMixin
from .types import Share

# Silence notification of no default logging handler
log = logging.getLogger("davsharing")
log.addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "AsyncAddressBook",
    "AsyncCalendar",
    "AsyncDAVClient",
    "Share",
    "ShareableMixin",
    "get_davclient",
]
