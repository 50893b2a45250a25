"""Stdio transport — newline-delimited JSON-RPC over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from apimcp.host.bridge import BridgeHost

logger = logging.getLogger(__name__)

STDIO_SESSION = "stdio"


async def serve_stdio(
    host: BridgeHost,
    *,
    reader: TextIO | None = None,
    writer: TextIO | None = None,
    session_id: str = STDIO_SESSION,
) -> None:
    """Answer one envelope per input line until *reader* reaches EOF.

    All lines share one session.  Notifications produce no output line.
    """
    source = reader or sys.stdin
    sink = writer or sys.stdout
    headers = {host.settings.session_header: session_id}

    while True:
        line = await asyncio.to_thread(source.readline)
        if not line:
            break
        if not line.strip():
            continue
        response = await host.handle(line, headers)
        if response.payload is None:
            continue
        sink.write(json.dumps(response.payload) + "\n")
        sink.flush()

    logger.info("Stdio input closed, stopping")
