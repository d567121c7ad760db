#!/usr/bin/env python
# -*- encoding: utf-8 -*-
"""
Tests for AsyncDAVObject / AsyncDAVCollection: property fetching,
exposed attributes and posting.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from lxml import etree

from davsharing.collection import AsyncCalendar
from davsharing.davclient import AsyncDAVResponse
from davsharing.davobject import AsyncDAVCollection, AsyncDAVObject
from davsharing.lib import error
from davsharing.lib.namespace import ns
from davsharing.lib.url import URL
from davsharing.types import ACCESS_READ, ACCESS_READ_WRITE, Share

CALENDAR_PROPFIND_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:" xmlns:oc="http://owncloud.org/ns"
    xmlns:cs="http://calendarserver.org/ns/" xmlns:x1="http://apple.com/ns/ical/">
  <d:response>
    <d:href>/remote.php/dav/calendars/alice/work/</d:href>
    <d:propstat>
      <d:prop>
        <d:displayname>Work</d:displayname>
        <d:resourcetype><d:collection/><cal:calendar xmlns:cal="urn:ietf:params:xml:ns:caldav"/></d:resourcetype>
        <x1:calendar-color>#0082c9</x1:calendar-color>
        <oc:invite>
          <oc:user>
            <d:href>principal:principals/users/bob</d:href>
            <oc:common-name>Bob</oc:common-name>
            <oc:invite-accepted/>
            <oc:access><oc:read-write/></oc:access>
          </oc:user>
          <oc:user>
            <d:href>principal:principals/groups/staff</d:href>
            <oc:invite-noresponse/>
            <oc:access><oc:read/></oc:access>
          </oc:user>
        </oc:invite>
        <cs:allowed-sharing-modes>
          <cs:can-be-shared/>
          <cs:can-be-published/>
        </cs:allowed-sharing-modes>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop>
        <cs:getctag/>
      </d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""


def create_mock_response(
    content: bytes = b"",
    status_code: int = 207,
    reason: str = "Multi-Status",
    headers: dict = None,
) -> MagicMock:
    resp = MagicMock()
    resp.content = content
    resp.status_code = status_code
    resp.reason = reason
    resp.headers = headers or {"Content-Type": "application/xml; charset=utf-8"}
    return resp


def create_mock_client(propfind_content: bytes = CALENDAR_PROPFIND_XML, status_code: int = 207) -> MagicMock:
    client = MagicMock()
    client.url = URL("https://cloud.example.com/remote.php/dav/")
    client.propfind = AsyncMock(
        return_value=AsyncDAVResponse(
            create_mock_response(propfind_content, status_code=status_code)
        )
    )
    return client


class TestAsyncDAVObject:
    def test_relative_url_is_joined_with_client_url(self) -> None:
        obj = AsyncDAVObject(client=create_mock_client(), url="calendars/alice/work/")
        assert str(obj.url) == "https://cloud.example.com/remote.php/dav/calendars/alice/work/"

    def test_client_from_parent(self) -> None:
        client = create_mock_client()
        parent = AsyncDAVObject(client=client, url="calendars/alice/")
        obj = AsyncDAVObject(parent=parent, url="/remote.php/dav/calendars/alice/work/")
        assert obj.client is client
        assert obj.url.path == "/remote.php/dav/calendars/alice/work/"

    def test_repr(self) -> None:
        obj = AsyncDAVObject(url="https://cloud.example.com/dav/")
        assert repr(obj) == "AsyncDAVObject(https://cloud.example.com/dav/)"

    @pytest.mark.asyncio
    async def test_post_without_client(self) -> None:
        obj = AsyncDAVObject(url="https://cloud.example.com/dav/")
        with pytest.raises(ValueError):
            await obj._post(b"", {})


class TestAsyncDAVCollection:
    def test_exposed_property_reads_props(self) -> None:
        collection = AsyncDAVCollection(
            url="https://cloud.example.com/dav/c/",
            props={"{DAV:}displayname": "Work"},
        )
        assert collection.display_name == "Work"
        assert collection.sync_token is None

    def test_unknown_attribute(self) -> None:
        collection = AsyncDAVCollection(url="https://cloud.example.com/dav/c/")
        with pytest.raises(AttributeError):
            collection.does_not_exist

    def test_propfind_list(self) -> None:
        assert AsyncDAVCollection.get_propfind_list() == [
            ("DAV:", "displayname"),
            ("DAV:", "owner"),
            ("DAV:", "resourcetype"),
            ("DAV:", "sync-token"),
            ("http://calendarserver.org/ns/", "getctag"),
        ]

    @pytest.mark.asyncio
    async def test_update_requests_the_propfind_list(self) -> None:
        client = create_mock_client()
        calendar = AsyncCalendar(client=client, url="calendars/alice/work/")

        await calendar.update()

        url, body, depth = client.propfind.call_args.args
        assert url == "https://cloud.example.com/remote.php/dav/calendars/alice/work/"
        assert depth == 0
        root = etree.fromstring(body)
        assert root.tag == "{DAV:}propfind"
        requested = [child.tag for child in root.find("{DAV:}prop")]
        assert requested == [
            "{%s}%s" % pair for pair in AsyncCalendar.get_propfind_list()
        ]

    @pytest.mark.asyncio
    async def test_update_populates_exposed_properties(self) -> None:
        calendar = AsyncCalendar(client=create_mock_client(), url="calendars/alice/work/")

        await calendar.update()

        assert calendar.display_name == "Work"
        assert calendar.color == "#0082c9"
        assert ns("C", "calendar") in calendar.resource_type
        assert calendar.ctag is None
        assert calendar.shares == [
            Share(
                href="principal:principals/users/bob",
                access=[ACCESS_READ_WRITE],
                common_name="Bob",
                invite_accepted=True,
            ),
            Share(
                href="principal:principals/groups/staff",
                access=[ACCESS_READ],
                common_name=None,
                invite_accepted=False,
            ),
        ]
        assert calendar.is_shareable()
        assert calendar.is_publishable()

    @pytest.mark.asyncio
    async def test_update_replaces_local_shares(self) -> None:
        client = create_mock_client()
        client.post = AsyncMock(return_value=MagicMock(status=204))
        calendar = AsyncCalendar(client=client, url="calendars/alice/work/")
        await calendar.share("principal:principals/users/eve")

        await calendar.update()

        assert "principal:principals/users/eve" not in [s.href for s in calendar.shares]
        assert len(calendar.shares) == 2

    @pytest.mark.asyncio
    async def test_update_not_found(self) -> None:
        client = create_mock_client(b"", status_code=404)
        calendar = AsyncCalendar(client=client, url="calendars/alice/gone/")
        with pytest.raises(error.NotFoundError):
            await calendar.update()

    @pytest.mark.asyncio
    async def test_update_server_error(self) -> None:
        client = create_mock_client(b"", status_code=500)
        calendar = AsyncCalendar(client=client, url="calendars/alice/work/")
        with pytest.raises(error.PropfindError):
            await calendar.update()
        assert calendar.shares == []

    @pytest.mark.asyncio
    async def test_update_with_slash_mismatch(self) -> None:
        calendar = AsyncCalendar(client=create_mock_client(), url="calendars/alice/work")
        await calendar.update()
        assert calendar.display_name == "Work"
