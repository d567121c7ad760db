#!/usr/bin/env python
"""
This file contains the AsyncDAVObject, the base class for every remote
resource, and the AsyncDAVCollection, the base class for calendars and
address books.  There is some code here for handling the DAV-related
communication: fetching properties with PROPFIND and posting request
bodies to the resource itself.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import ParseResult, SplitResult, unquote

from lxml import etree

from davsharing.elements import dav
from davsharing.elements.base import BaseElement, PropName
from davsharing.lib import error
from davsharing.lib.error import errmsg
from davsharing.lib.namespace import clark, nsmap
from davsharing.lib.url import URL
from davsharing.parsers import parse_property

if TYPE_CHECKING:
    from davsharing.davclient import AsyncDAVClient, AsyncDAVResponse

log = logging.getLogger("davsharing")


class AsyncDAVObject:
    """
    Base class for all DAV objects.  Can be instantiated by a client
    and an absolute or relative URL, or from the parent object.
    """

    url: Optional[URL] = None
    client: Optional["AsyncDAVClient"] = None
    parent: Optional["AsyncDAVObject"] = None
    name: Optional[str] = None

    def __init__(
        self,
        client: Optional["AsyncDAVClient"] = None,
        url: Union[str, ParseResult, SplitResult, URL, None] = None,
        parent: Optional["AsyncDAVObject"] = None,
        name: Optional[str] = None,
        props: Optional[Dict[str, Any]] = None,
        logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
    ) -> None:
        """
        Args:
          client: An AsyncDAVClient instance
          url: The url for this object.  May be a full URL or a relative URL.
          parent: The parent object
          name: A displayname
          props: a dict with known properties for this object, keyed by
            "{namespace}name"
          logger: where to send log records, defaults to the "davsharing" logger
        """
        if client is None and parent is not None:
            client = parent.client
        self.client = client
        self.parent = parent
        self.name = name
        self.props = dict(props or {})
        self.log = logger or log
        # url may be a path relative to the DAV root
        if client and url:
            self.url = client.url.join(url)
        elif url is None:
            self.url = None
        else:
            self.url = URL.objectify(url)

    def _check_connected(self) -> None:
        if self.url is None:
            raise ValueError("Unexpected value None for self.url")
        if self.client is None:
            raise ValueError("Unexpected value None for self.client")

    async def _query_properties(
        self, props: Optional[Sequence[BaseElement]] = None, depth: int = 0
    ) -> "AsyncDAVResponse":
        """
        Internal method for doing a propfind query.
        """
        self._check_connected()
        body = ""
        if props:
            root = dav.Propfind() + (dav.Prop() + props)
            body = etree.tostring(
                root.xmlelement(),
                encoding="utf-8",
                xml_declaration=True,
                pretty_print=error.debug_dump_communication,
            )

        ret = await self.client.propfind(str(self.url), body, depth)
        if ret.status == 404:
            raise error.NotFoundError(url=str(self.url), reason=errmsg(ret))
        if ret.status >= 400:
            raise error.PropfindError(url=str(self.url), reason=errmsg(ret))
        return ret

    async def _post(self, body: Union[str, bytes], headers: Dict[str, str]) -> "AsyncDAVResponse":
        """
        POST a body to this object.  Any non-success status is raised
        as error.PostError, transport failures propagate from the client.
        The response body is not parsed.
        """
        self._check_connected()
        ret = await self.client.post(str(self.url), body, headers)
        if ret.status >= 400:
            raise error.exception_by_method["post"](url=str(self.url), reason=errmsg(ret))
        return ret

    def __str__(self) -> str:
        return str(self.props.get(dav.DisplayName.tag) or self.url)

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, self.url)


class AsyncDAVCollection(AsyncDAVObject):
    """
    A collection resource (calendar, address book, ...).

    Properties fetched by update() are stored in self.props.  Some of
    them are exposed as plain read-only attributes, i.e.
    ``collection.display_name`` reads ``props["{DAV:}displayname"]``.
    Subclasses and mixins register more with _expose_property() in
    their constructor, and add the matching entries to
    get_propfind_list() so that update() asks the server for them.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._exposed_properties: Dict[str, str] = {}
        super().__init__(*args, **kwargs)
        self._expose_property("display_name", nsmap["D"], "displayname")
        self._expose_property("owner", nsmap["D"], "owner")
        self._expose_property("resource_type", nsmap["D"], "resourcetype")
        self._expose_property("sync_token", nsmap["D"], "sync-token")
        self._expose_property("ctag", nsmap["CS"], "getctag")

    def _expose_property(self, attr: str, namespace: str, name: str) -> None:
        """Makes props["{namespace}name"] readable as self.<attr>"""
        self._exposed_properties[attr] = clark(namespace, name)

    def __getattr__(self, attr: str) -> Any:
        ## only called when the normal attribute lookup fails
        exposed = self.__dict__.get("_exposed_properties", {})
        if attr in exposed:
            return self.props.get(exposed[attr])
        raise AttributeError(
            "%r object has no attribute %r" % (self.__class__.__name__, attr)
        )

    def __setattr__(self, attr: str, value: Any) -> None:
        if attr in self.__dict__.get("_exposed_properties", {}):
            raise AttributeError(
                "%s is fetched from the server and can't be set" % attr
            )
        super().__setattr__(attr, value)

    @classmethod
    def get_propfind_list(cls) -> List[Tuple[str, str]]:
        """The [namespace, name] pairs fetched by update()"""
        return [
            (nsmap["D"], "displayname"),
            (nsmap["D"], "owner"),
            (nsmap["D"], "resourcetype"),
            (nsmap["D"], "sync-token"),
            (nsmap["CS"], "getctag"),
        ]

    async def update(self) -> Dict[str, Any]:
        """
        Fetch the properties listed by get_propfind_list() and replace
        the cached values in self.props.  Properties the server reports
        as not found are left as they were.

        Returns:
          ``{proptag: value, ...}`` for the properties found
        """
        props = [PropName(namespace, name) for (namespace, name) in self.get_propfind_list()]
        response = await self._query_properties(props, depth=0)
        objects = response.find_objects_and_props()

        found = self._find_own_props(objects)
        values = {tag: parse_property(element) for (tag, element) in found.items()}
        self.props.update(values)
        return values

    def _find_own_props(self, objects: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        path = unquote(self.url.path)
        if path.endswith("/"):
            exchange_path = path[:-1]
        else:
            exchange_path = path + "/"

        if path in objects:
            return objects[path]
        if exchange_path in objects:
            self.log.warning(
                "potential path handling problem with ending slashes.  Path given: %s, path found: %s.  %s"
                % (path, exchange_path, error.ERR_FRAGMENT)
            )
            return objects[exchange_path]
        if len(objects) == 1:
            self.log.warning(
                "Possibly the server has a path handling problem, possibly the URL configured is wrong.\n"
                "Path expected: %s, path found: %s %s.\n"
                "Continuing, probably everything will be fine"
                % (path, str(list(objects)), error.ERR_FRAGMENT)
            )
            return list(objects.values())[0]
        error.weirdness(
            "no properties found for %s, paths found: %s" % (path, list(objects))
        )
        return {}
