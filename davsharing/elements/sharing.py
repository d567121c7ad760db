#!/usr/bin/env python
"""
Elements of the sharing extensions.  The share/unshare request bodies
and the invite property live in the ownCloud namespace, the sharing
capabilities are advertised in the CalendarServer namespace.
"""
from typing import ClassVar

from .base import BaseElement
from .base import ValuedBaseElement
from davsharing.lib.namespace import ns


# Operations
class Share(BaseElement):
    tag: ClassVar[str] = ns("OC", "share")


class Set(BaseElement):
    tag: ClassVar[str] = ns("OC", "set")


class Remove(BaseElement):
    tag: ClassVar[str] = ns("OC", "remove")


class ReadWrite(BaseElement):
    tag: ClassVar[str] = ns("OC", "read-write")


class Summary(ValuedBaseElement):
    tag: ClassVar[str] = ns("OC", "summary")


# Properties
class Invite(BaseElement):
    tag: ClassVar[str] = ns("OC", "invite")


class User(BaseElement):
    tag: ClassVar[str] = ns("OC", "user")


class CommonName(ValuedBaseElement):
    tag: ClassVar[str] = ns("OC", "common-name")


class InviteAccepted(BaseElement):
    tag: ClassVar[str] = ns("OC", "invite-accepted")


class Access(BaseElement):
    tag: ClassVar[str] = ns("OC", "access")


class AllowedSharingModes(BaseElement):
    tag: ClassVar[str] = ns("CS", "allowed-sharing-modes")
