#!/usr/bin/env python
"""
Async DAVClient for the davsharing library.

The client is the transport primitive everything else sits on: it
sends WebDAV requests (PROPFIND for fetching collection properties,
POST for the sharing requests) and wraps the answers in
AsyncDAVResponse objects.
"""

import logging
import os
import sys
from collections.abc import Iterable, Mapping
from types import TracebackType
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import unquote

import niquests
from niquests import AsyncSession
from niquests.auth import AuthBase
from niquests.models import Response
from niquests.structures import CaseInsensitiveDict

from lxml import etree
from lxml.etree import _Element

from davsharing import __version__
from davsharing.config import config_section, read_config
from davsharing.elements import dav
from davsharing.lib import error
from davsharing.lib.python_utilities import to_normal_str, to_wire
from davsharing.lib.url import URL

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("davsharing")

XML_CONTENT_TYPES = ("text/xml", "application/xml")
NON_XML_CONTENT_TYPES = ("text/plain", "text/html", "application/octet-stream")


class HTTPBearerAuth(AuthBase):
    def __init__(self, password: str) -> None:
        self.password = password

    def __eq__(self, other: object) -> bool:
        return self.password == getattr(other, "password", None)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.password}"
        return r


class AsyncDAVResponse:
    """
    Response from a DAV request.

    With parse=False only the status line, headers and raw body are
    kept.  Sharing requests are accepted implicitly, so the client
    never looks at the body of a POST answer.  PROPFIND answers are
    parsed into an lxml tree, find_objects_and_props() splits it into
    hrefs and props.
    """

    tree: Optional[_Element] = None

    def __init__(self, response: Response, parse: bool = True) -> None:
        self.headers = response.headers
        self.status: int = response.status_code
        self.reason: str = getattr(response, "reason", None) or ""
        self._raw = response.content or b""
        if parse:
            self.tree = self._parse_body()

    def _parse_body(self) -> Optional[_Element]:
        if not self._raw:
            return None
        content_type = self.headers.get("Content-Type", "")
        if content_type.startswith(NON_XML_CONTENT_TYPES):
            return None
        try:
            tree = etree.XML(self._raw, parser=etree.XMLParser(remove_blank_text=True))
        except etree.XMLSyntaxError as e:
            ## error pages may claim to be xml
            if content_type.startswith(XML_CONTENT_TYPES) and self.status < 400:
                raise error.ResponseError(reason="invalid XML in response: %s" % e) from e
            log.info("Expected some valid XML from the server, got: %r", self._raw)
            return None
        if error.debug_dump_communication:
            log.debug(etree.tostring(tree, pretty_print=True).decode("utf-8"))
        return tree

    @property
    def raw(self) -> str:
        return to_normal_str(self._raw)

    def validate_status(self, status: str) -> None:
        """
        status is a string like "HTTP/1.1 404 Not Found".  Within a
        multistatus, 200, 201, 207 and 404 are fine.
        """
        if not any(" %s " % code in status for code in (200, 201, 207, 404)):
            raise error.ResponseError(reason=status)

    def _responses(self) -> List[_Element]:
        ## Some servers leave out the multistatus wrapper
        if self.tree.tag == dav.MultiStatus.tag:
            return list(self.tree)
        return [self.tree]

    def _parse_response(self, response: _Element) -> Tuple[str, List[_Element]]:
        """The href and the propstats of one <d:response>"""
        href: Optional[str] = None
        propstats: List[_Element] = []
        error.assert_(response.tag == dav.Response.tag)
        for elem in response:
            if elem.tag == dav.Status.tag:
                self.validate_status(elem.text or "")
            elif elem.tag == dav.Href.tag:
                error.assert_(not href)
                href = unquote(elem.text or "")
            elif elem.tag == dav.PropStat.tag:
                propstats.append(elem)
            else:
                error.weirdness("unexpected element found in response", elem)
        error.assert_(href)
        ## servers may hand out absolute URLs, the callers expect paths
        if href and "://" in href:
            href = unquote(URL(href).path)
        return (href or "", propstats)

    def find_objects_and_props(self) -> Dict[str, Dict[str, _Element]]:
        """
        Split the multistatus into ``{href: {proptag: prop_element}}``.
        Props delivered with a 404 propstat are skipped.
        """
        objects: Dict[str, Dict[str, _Element]] = {}
        if self.tree is None:
            return objects

        for r in self._responses():
            (href, propstats) = self._parse_response(r)
            props = objects.setdefault(href, {})
            ## one propstat per status, each holding one or more props
            for propstat in propstats:
                status = propstat.find(dav.Status.tag)
                error.assert_(status is not None)
                if status is not None and status.text:
                    self.validate_status(status.text)
                    if " 404 " in status.text:
                        continue
                for prop in propstat.iterfind(dav.Prop.tag):
                    for theprop in prop:
                        props[theprop.tag] = theprop
        return objects


class AsyncDAVClient:
    """
    Async WebDAV client.

    The recommended way to create a client is via get_davclient():
        async with await get_davclient(url="...", username="...", password="...") as client:
            calendar = AsyncCalendar(client=client, url="calendars/alice/work/")
    """

    def __init__(
        self,
        url: Optional[str] = "",
        proxy: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        auth: Optional[AuthBase] = None,
        auth_type: Optional[str] = None,
        timeout: Optional[int] = None,
        ssl_verify_cert: Union[bool, str] = True,
        ssl_cert: Union[str, Tuple[str, str], None] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Args:
            url: server URL, i.e. https://cloud.example.com/remote.php/dav/
            proxy: Proxy server (scheme://hostname:port).
            username: Username for authentication.
            password: Password for authentication.
            auth: Custom auth object (niquests.auth.AuthBase).
            auth_type: Auth type ('bearer', 'digest', or 'basic').
            timeout: Request timeout in seconds.
            ssl_verify_cert: SSL certificate verification (bool or CA bundle path).
            ssl_cert: Client SSL certificate (path or (cert, key) tuple).
            headers: Additional headers for all requests.
        """
        self.session = AsyncSession()
        self.url = URL.objectify(url)

        ## credentials in the URL are used unless given explicitly,
        ## an explicit empty string is kept
        if username is None and self.url.username:
            username = unquote(self.url.username)
        if password is None and self.url.password:
            password = unquote(self.url.password)
        self.username = username
        self.password = password

        self.auth = auth
        self.auth_type = auth_type.lower() if auth_type else None
        if not self.auth and self.auth_type:
            self.build_auth_object([self.auth_type])

        self.proxy = proxy
        if self.proxy is not None and "://" not in self.proxy:
            self.proxy = "http://" + self.proxy

        self.timeout = timeout
        self.ssl_verify_cert = ssl_verify_cert
        self.ssl_cert = ssl_cert

        self.headers: Dict[str, str] = {
            "User-Agent": f"python-davsharing/{__version__}",
        }
        self.headers.update(headers or {})

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the async session."""
        await self.session.close()

    async def _send(
        self, method: str, url_obj: URL, body: Any, headers: Mapping[str, str]
    ) -> Response:
        proxies = None
        if self.proxy is not None:
            proxies = {url_obj.scheme: self.proxy}
        try:
            return await self.session.request(
                method,
                str(url_obj),
                data=to_wire(body),
                headers=headers,
                proxies=proxies,
                auth=self.auth,
                timeout=self.timeout,
                verify=self.ssl_verify_cert,
                cert=self.ssl_cert,
            )
        except niquests.exceptions.RequestException as e:
            raise error.TransportError(url=str(url_obj), reason=str(e)) from e

    async def request(
        self,
        url: str,
        method: str = "GET",
        body: Union[str, bytes] = "",
        headers: Optional[Mapping[str, str]] = None,
        parse: bool = True,
    ) -> AsyncDAVResponse:
        """
        Send an HTTP request.

        Network failures are raised as error.TransportError, 401 and
        403 as error.AuthorizationError.  Any other status is handed
        back to the caller in the AsyncDAVResponse.  With parse=False
        the response body is not parsed.
        """
        combined_headers = dict(self.headers)
        combined_headers.update(headers or {})
        if not body:
            combined_headers.pop("Content-Type", None)

        url_obj = URL.objectify(url)
        log.debug(
            "sending request - method=%s, url=%s, headers=%s\nbody:\n%s",
            method, url_obj, combined_headers, to_normal_str(body),
        )

        r = await self._send(method, url_obj, body, combined_headers)
        log.debug("server responded with %s %s", r.status_code, r.reason)

        r_headers = CaseInsensitiveDict(r.headers)
        if (
            r.status_code == 401
            and "WWW-Authenticate" in r_headers
            and not self.auth
            and (self.username or self.password)
        ):
            self.build_auth_object(self.extract_auth_types(r_headers["WWW-Authenticate"]))
            return await self.request(url, method, body, headers, parse)

        response = AsyncDAVResponse(r, parse=parse)
        if response.status in (401, 403):
            raise error.AuthorizationError(
                url=str(url_obj), reason=response.reason or "None given"
            )
        return response

    async def propfind(
        self,
        url: Optional[str] = None,
        body: Union[str, bytes] = "",
        depth: int = 0,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AsyncDAVResponse:
        """
        Send a PROPFIND request.

        Args:
            url: Target URL (defaults to self.url).
            body: XML properties request.
            depth: Maximum recursion depth.
            headers: Additional headers.
        """
        final_headers = {
            "Depth": str(depth),
            "Content-Type": 'application/xml; charset="utf-8"',
        }
        final_headers.update(headers or {})
        return await self.request(url or str(self.url), "PROPFIND", body, final_headers)

    async def post(
        self,
        url: str,
        body: Union[str, bytes],
        headers: Optional[Mapping[str, str]] = None,
    ) -> AsyncDAVResponse:
        """
        Send a POST request.  The sharing extensions use POST on the
        collection itself; the answer is judged by its status only.
        """
        return await self.request(url, "POST", body, headers, parse=False)

    def extract_auth_types(self, header: str) -> set:
        """Authentication types offered in a WWW-Authenticate header"""
        # https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
        return {h.split()[0] for h in header.lower().split(",") if h.strip()}

    def build_auth_object(self, auth_types: Optional[Iterable[str]] = None) -> None:
        """
        Build the authentication object from the configured credentials.
        An explicit auth_type must be among auth_types, otherwise
        digest is preferred over basic, basic over bearer.
        """
        auth_types = {t.lower() for t in auth_types or ()}
        auth_type = self.auth_type
        if auth_type is None:
            for candidate in ("digest", "basic", "bearer"):
                if candidate in auth_types:
                    auth_type = candidate
                    break
            else:
                raise error.AuthorizationError(
                    reason="The server does not offer any supported auth type "
                    f"(basic, digest, bearer).  Offered: {sorted(auth_types)}"
                )
        elif auth_types and auth_type not in auth_types:
            raise error.AuthorizationError(
                reason=f"Auth type {auth_type} not supported by server. Supported: {sorted(auth_types)}"
            )

        if auth_type == "bearer":
            self.auth = HTTPBearerAuth(self.password)
        elif auth_type == "digest":
            from niquests.auth import AsyncHTTPDigestAuth

            self.auth = AsyncHTTPDigestAuth(self.username, self.password)
        elif auth_type == "basic":
            from niquests.auth import HTTPBasicAuth

            self.auth = HTTPBasicAuth(self.username, self.password)
        else:
            raise error.AuthorizationError(reason=f"Unsupported auth type: {auth_type}")


async def get_davclient(
    url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    probe: bool = False,
    config_file: Optional[str] = None,
    config_section_name: str = "default",
    **kwargs: Any,
) -> AsyncDAVClient:
    """
    Get an async DAV client instance.

    Connection parameters are taken from the arguments, then from the
    environment (DAVSHARING_URL, DAVSHARING_USERNAME,
    DAVSHARING_PASSWORD), then from a config file section.

    Args:
        url: server URL.
        username: Username for authentication.
        password: Password for authentication.
        probe: Verify connectivity with an OPTIONS request.
        config_file: path to a JSON/YAML config file.  The standard
            locations are searched if not given.
        config_section_name: section of the config file to use.
        **kwargs: Additional arguments passed to AsyncDAVClient.
    """
    url = url or os.environ.get("DAVSHARING_URL")
    username = username or os.environ.get("DAVSHARING_USERNAME")
    password = password or os.environ.get("DAVSHARING_PASSWORD")

    if not url:
        section = config_section(read_config(config_file), config_section_name)
        url = section.pop("url", None)
        username = username or section.pop("username", None)
        password = password or section.pop("password", None)
        section.pop("username", None)
        section.pop("password", None)
        for key, value in section.items():
            kwargs.setdefault(key, value)

    if not url:
        raise ValueError(
            "URL is required. Provide via url parameter, DAVSHARING_URL environment variable or a config file."
        )

    client = AsyncDAVClient(url=url, username=username, password=password, **kwargs)

    if probe:
        try:
            response = await client.request(str(client.url), "OPTIONS", parse=False)
        except error.DAVError:
            await client.close()
            raise
        log.info("Connected to DAV server: %s", client.url)
        if not response.headers.get("DAV", ""):
            log.warning("Server did not return DAV header - may not be a DAV server")

    return client
