#!/usr/bin/env python
import logging
import os
from collections import defaultdict
from typing import Dict
from typing import Optional

from lxml import etree

from davsharing import __version__

## Environmental variables prepended with "PYTHON_DAVSHARING" are used
## for debug purposes, the ones prepended with "DAVSHARING_" are for
## connection parameters
debug_dump_communication = bool(os.environ.get("PYTHON_DAVSHARING_COMMDUMP", False))
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_DAVSHARING_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davsharing")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting an error response to an error string"""
    return "%s %s\n\n%s" % (r.status, r.reason, r.raw)


def _describe(thing) -> str:
    """Strings as they are, XML elements serialized"""
    if hasattr(thing, "xmlelement"):
        thing = thing.xmlelement()
    if isinstance(thing, etree._Element):
        return etree.tostring(thing).decode("utf-8")
    return str(thing)


def weirdness(*reasons):
    reason = " : ".join([_describe(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue on the davsharing issue tracker, include this error and the traceback (if any) and tell what server you are using"


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class AuthorizationError(DAVError):
    """
    The client encountered an HTTP 401 or 403 error and is passing it on
    to the user. The url property will contain the url in question,
    the reason property will contain the excuse the server sent.
    """

    pass


class TransportError(DAVError):
    """
    The request never got a response - connection refused, timeout,
    TLS failure and the like.
    """

    pass


class PostError(DAVError):
    """The server answered a POST (share/unshare) with a non-success status"""

    pass


class PropfindError(DAVError):
    pass


class NotFoundError(DAVError):
    pass


class ResponseError(DAVError):
    pass


exception_by_method: Dict[str, DAVError] = defaultdict(lambda: DAVError)
for method in (
    "post",
    "propfind",
):
    exception_by_method[method] = locals()[method[0].upper() + method[1:] + "Error"]
