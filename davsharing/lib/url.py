#!/usr/bin/env python
from typing import Any
from typing import Optional
from typing import Union
from urllib.parse import ParseResult
from urllib.parse import SplitResult
from urllib.parse import urlparse


class URL:
    """
    Collection addresses are handed around as URL objects, but every
    method accepting one also takes a string or a parsed URL.

    A collection address is either a path relative to the DAV root
    ("calendars/alice/work/"), an absolute path
    ("/remote.php/dav/calendars/alice/work/") or a full URL.  Host and
    credentials come from the client and can't be changed by joining.
    """

    def __init__(self, url: Union[str, ParseResult, SplitResult]) -> None:
        if isinstance(url, (ParseResult, SplitResult)):
            self.url_parsed = url
        else:
            self.url_parsed = urlparse(url)

    @classmethod
    def objectify(cls, url: Union["URL", str, ParseResult, SplitResult, None]) -> Optional["URL"]:
        if url is None or isinstance(url, URL):
            return url
        return URL(url)

    ## scheme, hostname, path, username ... come from the parse result
    def __getattr__(self, attr: str) -> Any:
        if "url_parsed" not in vars(self):
            raise AttributeError(attr)
        return getattr(self.url_parsed, attr)

    def __str__(self) -> str:
        return self.url_parsed.geturl()

    def __repr__(self) -> str:
        return "URL(%s)" % str(self)

    def join(self, path: Any) -> "URL":
        """
        A relative path is appended to this URL's path, an absolute one
        replaces it.  Joining a URL pointing to another scheme, host or
        port raises ValueError.
        """
        if not path or not str(path):
            return self
        other = URL.objectify(path)
        for attr in ("scheme", "hostname", "port"):
            mine, theirs = getattr(self, attr), getattr(other, attr)
            if mine and theirs and mine != theirs:
                raise ValueError("%s can't be joined with %s" % (self, other))

        if other.path.startswith("/"):
            new_path = other.path
        elif self.path.endswith("/"):
            new_path = self.path + other.path
        else:
            new_path = "%s/%s" % (self.path, other.path)
        return URL(
            ParseResult(
                self.scheme or other.scheme,
                self.netloc or other.netloc,
                new_path,
                other.params,
                other.query,
                other.fragment,
            )
        )
