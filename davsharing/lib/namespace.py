#!/usr/bin/env python
from typing import Any
from typing import Dict
from typing import Optional

nsmap: Dict[str, str] = {
    "D": "DAV:",
    "C": "urn:ietf:params:xml:ns:caldav",
    "CR": "urn:ietf:params:xml:ns:carddav",
    "CS": "http://calendarserver.org/ns/",
    "OC": "http://owncloud.org/ns",
}

## The apple ical namespace carries calendar-color and calendar-order.
## It's widely supported but undocumented, so it's kept out of the
## namespace list shipped with every request.
nsmap2: Dict[str, Any] = nsmap.copy()
nsmap2["I"] = "http://apple.com/ns/ical/"


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap2[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name


def clark(namespace: str, tag: str) -> str:
    """[namespace, tag] -> "{namespace}tag" """
    return "{%s}%s" % (namespace, tag)
