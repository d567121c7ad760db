#!/usr/bin/env python
"""
Sharing of collections, using the ownCloud/Nextcloud sharing extension
for the share requests and the CalendarServer allowed-sharing-modes
property for the capabilities.

The sharing requests are POSTed to the collection itself.  The server
accepts them implicitly - a success status, no body to parse - and the
local list of shares is updated right away, without re-fetching the
invite property.  There is no locking: concurrent share/unshare calls
on the same collection must be serialized by the caller if the order
of the local updates matters.
"""

from typing import Any, List, Tuple

from lxml import etree

from davsharing.elements import dav, sharing
from davsharing.lib import error
from davsharing.lib.namespace import nsmap
from davsharing.types import CAN_BE_PUBLISHED, CAN_BE_SHARED, Share, access_token

SHARE_HEADERS = {"Content-Type": "application/xml; charset=utf-8"}


def build_share_body(principal_scheme: str, writeable: bool = False, summary: str = "") -> bytes:
    """
    <oc:share>
      <oc:set>
        <d:href>principal_scheme</d:href>
        <oc:read-write/>          (only if writeable)
        <oc:summary>...</oc:summary>  (only if a summary is given)
      </oc:set>
    </oc:share>
    """
    set_ = sharing.Set() + dav.Href(principal_scheme)
    if writeable:
        set_ += sharing.ReadWrite()
    if summary != "":
        set_ += sharing.Summary(summary)
    return _serialize(sharing.Share() + set_)


def build_unshare_body(principal_scheme: str) -> bytes:
    """<oc:share><oc:remove><d:href>principal_scheme</d:href></oc:remove></oc:share>"""
    return _serialize(sharing.Share() + (sharing.Remove() + dav.Href(principal_scheme)))


def _serialize(root) -> bytes:
    return etree.tostring(
        root.xmlelement(),
        encoding="utf-8",
        xml_declaration=True,
        pretty_print=error.debug_dump_communication,
    )


class ShareableMixin:
    """
    Adds share(), unshare(), is_shareable() and is_publishable() to a
    collection class.  Use it in front of the collection base:

        class AsyncCalendar(ShareableMixin, AsyncDAVCollection):
            ...

    The collection must provide url, props, log, _expose_property(),
    _post() and get_propfind_list() - AsyncDAVCollection does.

    Exposed properties:
        shares: list of Share, from the {OC}invite property
        allowed_sharing_modes: capability tokens from the
            {CS}allowed-sharing-modes property, None until fetched
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._expose_property("shares", nsmap["OC"], "invite")
        self._expose_property(
            "allowed_sharing_modes", nsmap["CS"], "allowed-sharing-modes"
        )
        ## shares are mutated in place, never the caller's list
        self.props[sharing.Invite.tag] = list(self.props.get(sharing.Invite.tag) or [])

    @classmethod
    def get_propfind_list(cls) -> List[Tuple[str, str]]:
        return super().get_propfind_list() + [
            (nsmap["OC"], "invite"),
            (nsmap["CS"], "allowed-sharing-modes"),
        ]

    def _find_share(self, principal_scheme: str) -> int:
        for (i, share) in enumerate(self.shares):
            if share.href == principal_scheme:
                return i
        return -1

    async def share(
        self, principal_scheme: str, writeable: bool = False, summary: str = ""
    ) -> None:
        """
        Shares the collection with a principal.

        Sharing again with the same principal changes the access level
        of the existing share.

        Args:
          principal_scheme: the principal, i.e. "principal:principals/users/bob".
            Sent to the server as given.
          writeable: grant read-write rather than read-only access
          summary: a description sent along with the invitation

        Raises:
          error.DAVError if the server refuses or can't be reached.  The
          local shares are left untouched in that case.
        """
        self.log.debug("Sharing %s with %s", self.url, principal_scheme)
        body = build_share_body(principal_scheme, writeable, summary)
        await self._post(body, SHARE_HEADERS)

        index = self._find_share(principal_scheme)
        if index == -1:
            self.shares.append(
                Share(
                    href=principal_scheme,
                    access=[access_token(writeable)],
                    common_name=None,
                    invite_accepted=True,
                )
            )
        else:
            self.shares[index].access = [access_token(writeable)]

    async def unshare(self, principal_scheme: str) -> None:
        """
        Stops sharing the collection with a principal.  Unsharing a
        principal not in the local shares is not an error.

        Raises:
          error.DAVError if the server refuses or can't be reached.  The
          local shares are left untouched in that case.
        """
        self.log.debug("Unsharing %s with %s", self.url, principal_scheme)
        body = build_unshare_body(principal_scheme)
        await self._post(body, SHARE_HEADERS)

        index = self._find_share(principal_scheme)
        if index == -1:
            return
        del self.shares[index]

    ## No distinction between "not fetched yet" and "fetched and not
    ## allowed" - both are False.
    def is_shareable(self) -> bool:
        if not isinstance(self.allowed_sharing_modes, (list, tuple)):
            return False
        return CAN_BE_SHARED in self.allowed_sharing_modes

    def is_publishable(self) -> bool:
        if not isinstance(self.allowed_sharing_modes, (list, tuple)):
            return False
        return CAN_BE_PUBLISHED in self.allowed_sharing_modes
