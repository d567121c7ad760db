#!/usr/bin/env python
"""
Calendars and address books.  Both can be shared, so both carry the
ShareableMixin on top of the plain collection.
"""
from typing import Any, List, Tuple

from davsharing.davobject import AsyncDAVCollection
from davsharing.lib.namespace import nsmap, nsmap2
from davsharing.shareable import ShareableMixin


class AsyncCalendar(ShareableMixin, AsyncDAVCollection):
    """
    A calendar collection.  In addition to the collection properties
    the calendar color and description are fetched.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._expose_property("color", nsmap2["I"], "calendar-color")
        self._expose_property("description", nsmap["C"], "calendar-description")

    @classmethod
    def get_propfind_list(cls) -> List[Tuple[str, str]]:
        return super().get_propfind_list() + [
            (nsmap2["I"], "calendar-color"),
            (nsmap["C"], "calendar-description"),
        ]


class AsyncAddressBook(ShareableMixin, AsyncDAVCollection):
    """An address book collection (CardDAV)"""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._expose_property("description", nsmap["CR"], "addressbook-description")

    @classmethod
    def get_propfind_list(cls) -> List[Tuple[str, str]]:
        return super().get_propfind_list() + [
            (nsmap["CR"], "addressbook-description"),
        ]
