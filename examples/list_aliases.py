"""List the public alias catalog and the live config for one alias."""

import argparse
import asyncio

import httpx

from aliasgate import GatewayClient


async def run(host: str, alias_id: str | None) -> None:
    async with httpx.AsyncClient(base_url=host) as http:
        client = GatewayClient(http)
        for alias in await client.list_aliases():
            print(f"{alias.alias_id}: {', '.join(alias.capabilities)}")

        live = await client.live_config(alias_id)
        print(f"live url for {live.alias_id}: {live.live_url}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="http://127.0.0.1:8000")
    parser.add_argument("--alias-id")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    asyncio.run(run(args.host, args.alias_id))


if __name__ == "__main__":
    main()
