#!/usr/bin/env python3

import asyncio
import json
import sys

import httpx
from idvdemo.services.poller import wait_for_result


async def main(base_url: str, token: str) -> int:
    async with httpx.AsyncClient(base_url=base_url, timeout=10) as client:
        record = await wait_for_result(client, token)
    if record is None:
        print("Timed out waiting for the verification result", file=sys.stderr)
        return 1
    print(json.dumps(record, indent=2))
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: poll_result.py <base_url> <token>")
        sys.exit(1)

    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
