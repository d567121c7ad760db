#!/usr/bin/env python
"""
Sharing a calendar with another user.

To run this example:

    env DAVSHARING_USERNAME=alice \
        DAVSHARING_PASSWORD=xxx \
        DAVSHARING_URL=https://cloud.example.com/remote.php/dav/ \
    python ./examples/sharing_examples.py calendars/alice/personal/ principal:principals/users/bob
"""

import asyncio
import sys

from davsharing import AsyncCalendar, get_davclient
from davsharing.lib import error


async def run_examples(calendar_path: str, sharee: str) -> None:
    async with await get_davclient(probe=True) as client:
        calendar = AsyncCalendar(client=client, url=calendar_path)

        ## Fetches display name, shares and sharing capabilities
        await calendar.update()
        print(f"{calendar.display_name}: shareable={calendar.is_shareable()} "
              f"publishable={calendar.is_publishable()}")
        if not calendar.is_shareable():
            print("The server does not allow sharing this calendar")
            return

        await calendar.share(sharee, summary="shared from the davsharing examples")
        print_shares(calendar)

        ## Sharing again changes the access level of the existing share
        await calendar.share(sharee, writeable=True)
        print_shares(calendar)

        try:
            await calendar.unshare(sharee)
        except error.DAVError as e:
            print(f"Unsharing failed, the share is still in place: {e}")
        print_shares(calendar)

        ## The local list is updated optimistically, this is what the
        ## server actually has
        await calendar.update()
        print_shares(calendar)


def print_shares(calendar: AsyncCalendar) -> None:
    print("Shares:")
    for share in calendar.shares:
        print(f"  {share.href} ({share.common_name}) writeable={share.writeable}")


if __name__ == "__main__":
    asyncio.run(run_examples(sys.argv[1], sys.argv[2]))
