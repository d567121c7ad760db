"""
Parsers turning property elements from a PROPFIND answer into python
values.  Properties without a dedicated parser get their text content.
"""
from typing import Any, Callable, Dict, List, Optional

from lxml.etree import _Element

from davsharing.elements import dav, sharing
from davsharing.lib import error
from davsharing.types import Share


def parse_text(element: _Element) -> Optional[str]:
    if element.text:
        return element.text.strip() or None
    return None


def parse_tag_list(element: _Element) -> List[str]:
    """<prop><a/><b/></prop> -> ["{ns}a", "{ns}b"]"""
    return [child.tag for child in element if isinstance(child.tag, str)]


def parse_href(element: _Element) -> Optional[str]:
    href = element.find(dav.Href.tag)
    if href is None:
        return parse_text(element)
    return parse_text(href)


def parse_invite(element: _Element) -> List[Share]:
    """
    Parses the ownCloud invite property:

        <oc:invite>
          <oc:user>
            <d:href>principal:principals/users/bob</d:href>
            <oc:common-name>Bob</oc:common-name>
            <oc:invite-accepted/>
            <oc:access><oc:read-write/></oc:access>
          </oc:user>
        </oc:invite>
    """
    shares = []
    for user in element.iterfind(sharing.User.tag):
        href = user.find(dav.Href.tag)
        if href is None or not href.text:
            error.weirdness("invite entry without href", user)
            continue
        common_name = user.find(sharing.CommonName.tag)
        access = user.find(sharing.Access.tag)
        shares.append(
            Share(
                href=href.text.strip(),
                access=parse_tag_list(access) if access is not None else [],
                common_name=parse_text(common_name) if common_name is not None else None,
                invite_accepted=user.find(sharing.InviteAccepted.tag) is not None,
            )
        )
    return shares


parsers: Dict[str, Callable[[_Element], Any]] = {
    dav.ResourceType.tag: parse_tag_list,
    dav.Owner.tag: parse_href,
    sharing.Invite.tag: parse_invite,
    sharing.AllowedSharingModes.tag: parse_tag_list,
}


def parse_property(element: _Element) -> Any:
    return parsers.get(element.tag, parse_text)(element)
