"""Open a live session for an alias, send one text turn and print the events."""

import argparse
import asyncio
import logging

import httpx

from aliasgate import GatewayClient, RealtimeSessionClient, SessionConfig, TelemetrySink
from aliasgate.events import AudioReceived, Closed, SessionError, TurnComplete
from aliasgate.telemetry import HttpWriter


async def run(host: str, alias_id: str, text: str) -> None:
    async with httpx.AsyncClient(base_url=host) as http:
        gateway = GatewayClient(http)
        live = await gateway.live_config(alias_id)

        sink = TelemetrySink(writers=[HttpWriter(gateway)])
        async with sink.running():
            client = RealtimeSessionClient.from_live_config(live, origin=host, telemetry=sink)
            with client.subscribe() as events:
                if not await client.connect(SessionConfig.from_live_config(live)):
                    print(events.drain())
                    return

                await client.send({"text": text})
                async for event in events:
                    if isinstance(event, AudioReceived):
                        print(f"audio: {len(event.data)} bytes")
                    else:
                        print(event)
                    if isinstance(event, TurnComplete | SessionError | Closed):
                        break

                await client.disconnect()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="http://127.0.0.1:8000")
    parser.add_argument("--alias-id", default="echo-v1.0")
    parser.add_argument("--text", default="Translate: good morning")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    asyncio.run(run(args.host, args.alias_id, args.text))


if __name__ == "__main__":
    main()
