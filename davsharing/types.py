"""
Data types for collection sharing.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from davsharing.lib.namespace import ns

ACCESS_READ = ns("OC", "read")
ACCESS_READ_WRITE = ns("OC", "read-write")

CAN_BE_SHARED = ns("CS", "can-be-shared")
CAN_BE_PUBLISHED = ns("CS", "can-be-published")


def access_token(writeable: bool) -> str:
    return ACCESS_READ_WRITE if writeable else ACCESS_READ


@dataclass
class Share:
    """
    One grant of access to a principal.

    Attributes:
        href: the principal, i.e. "principal:principals/users/alice".
            Unique within the shares of one collection.
        access: access level tokens, normally exactly one of
            ACCESS_READ and ACCESS_READ_WRITE
        common_name: display name of the principal, only known when the
            share was fetched from the server
        invite_accepted: whether the sharee has accepted.  Shares created
            locally are optimistically marked as accepted.
    """

    href: str
    access: List[str] = field(default_factory=list)
    common_name: Optional[str] = None
    invite_accepted: bool = False

    @property
    def writeable(self) -> bool:
        return ACCESS_READ_WRITE in self.access

    def as_dict(self) -> Dict[str, Any]:
        """The share with the property names used on the wire"""
        ret = asdict(self)
        ret["common-name"] = ret.pop("common_name")
        ret["invite-accepted"] = ret.pop("invite_accepted")
        return ret
