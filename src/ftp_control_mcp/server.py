"""MCP server entry point for raw FTP control sessions.

Exposes a single control connection through tools, resources, and prompts
via the Model Context Protocol using the official Python MCP SDK with
stdio transport. Replies are handed back as raw codes and message lines.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .models.traffic import TrafficRecorder
from .protocol.channel import ControlChannel
from .protocol.errors import IllegalReplyError, UnsupportedEncodingError
from .protocol.lines import DEFAULT_ENCODING
from .protocol.observers import LoggingObserver
from .transport.tcp_connection import DEFAULT_PORT, DEFAULT_TIMEOUT, TCPConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ftp-control",
    instructions="MCP server for driving a raw FTP control connection",
)

# Global session state
_connection: TCPConnection | None = None
_channel: ControlChannel | None = None
_traffic = TrafficRecorder()


def _get_channel() -> ControlChannel:
    """Get the active control channel, raising if not connected."""
    if _channel is None or _channel.closed:
        raise RuntimeError(
            "Not connected to a server. Use the 'connect' tool first."
        )
    return _channel


def _drop_session() -> None:
    global _connection, _channel
    if _channel is not None:
        _channel.close()
    _connection = None
    _channel = None


def _read_replies(channel: ControlChannel, count: int) -> dict[str, Any]:
    """Read ``count`` replies, closing the session on framing or I/O errors."""
    replies = []
    try:
        for _ in range(count):
            replies.append(channel.read_reply().to_dict())
    except IllegalReplyError as e:
        _drop_session()
        return {"replies": replies, "error": str(e), "line": e.line, "disconnected": True}
    except OSError as e:
        _drop_session()
        return {"replies": replies, "error": f"I/O error: {e}", "disconnected": True}
    return {"replies": replies}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    host: str,
    port: int = DEFAULT_PORT,
    encoding: str = DEFAULT_ENCODING,
    timeout: float = DEFAULT_TIMEOUT,
    read_greeting: bool = True,
) -> dict[str, Any]:
    """Open a control connection to an FTP server.

    Args:
        host: Server host name or address.
        port: Control port (default 21).
        encoding: Text encoding for commands and replies (default utf-8).
        timeout: Socket timeout in seconds for every read and write.
        read_greeting: Read the server's welcome reply right away.
    """
    global _connection, _channel
    if _channel is not None and not _channel.closed:
        return {
            "connected": True,
            "message": "Already connected",
            "host": _connection.info.host,
            "port": _connection.info.port,
        }

    if not 1 <= port <= 65535:
        return {"error": "Port must be 1-65535"}

    connection = TCPConnection(host, port, timeout=timeout)
    try:
        info = connection.open()
    except ConnectionError as e:
        return {"error": str(e)}

    try:
        channel = ControlChannel(connection, encoding=encoding)
    except UnsupportedEncodingError as e:
        connection.close()
        return {"error": str(e)}

    channel.add_observer(LoggingObserver())
    channel.add_observer(_traffic)
    _connection = connection
    _channel = channel

    result: dict[str, Any] = {"connected": True, "encoding": channel.encoding}
    result.update(info.to_dict())

    if read_greeting:
        greeting = _read_replies(channel, 1)
        if "error" in greeting:
            return {"connected": False, **greeting}
        result["greeting"] = greeting["replies"][0]

    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the control connection without sending QUIT."""
    _drop_session()
    return {"disconnected": True}


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Report whether a session is open and which encoding it uses."""
    if _channel is None or _channel.closed:
        return {"connected": False}
    result: dict[str, Any] = {"connected": True, "encoding": _channel.encoding}
    result.update(_connection.info.to_dict())
    return result


# ─── COMMAND TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def send_command(command: str) -> dict[str, Any]:
    """Send one raw command line without reading a reply.

    Args:
        command: Command text without the line terminator (e.g. "PASV").
    """
    if "\r" in command or "\n" in command:
        return {"error": "Command must be a single line"}

    channel = _get_channel()
    try:
        channel.send_command(command)
    except OSError as e:
        _drop_session()
        return {"error": f"I/O error: {e}", "disconnected": True}
    return {"sent": command}


@mcp.tool()
def read_reply(count: int = 1) -> dict[str, Any]:
    """Read one or more complete replies from the server.

    Args:
        count: Number of replies to read (1-10, default 1).
    """
    if not 1 <= count <= 10:
        return {"error": "Count must be 1-10"}
    return _read_replies(_get_channel(), count)


@mcp.tool()
def execute(command: str, replies: int = 1) -> dict[str, Any]:
    """Send a command and read its replies.

    Transfer commands such as RETR answer twice (150 then 226); pass
    ``replies=2`` for those. Use ``replies=0`` to only send.

    Args:
        command: Command text without the line terminator.
        replies: Number of replies to read after sending (0-10, default 1).
    """
    if not 0 <= replies <= 10:
        return {"error": "Replies must be 0-10"}

    sent = send_command(command)
    if "error" in sent:
        return sent

    result = _read_replies(_get_channel(), replies) if replies else {"replies": []}
    result["sent"] = command
    return result


@mcp.tool()
def change_encoding(encoding: str) -> dict[str, Any]:
    """Switch the session's text encoding, e.g. after "OPTS UTF8 ON".

    Args:
        encoding: Codec name such as "utf-8", "latin-1" or "cp1251".
    """
    channel = _get_channel()
    try:
        channel.change_encoding(encoding)
    except UnsupportedEncodingError as e:
        return {"error": str(e), "encoding": channel.encoding}
    return {"encoding": channel.encoding}


# ─── TRAFFIC TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def get_traffic(limit: int = 50) -> dict[str, Any]:
    """Return the most recent lines sent and received.

    Args:
        limit: Maximum number of lines to return (default 50).
    """
    if limit < 0:
        return {"error": "Limit must not be negative"}
    return {"traffic": [entry.to_dict() for entry in _traffic.entries(limit)]}


@mcp.tool()
def clear_traffic() -> dict[str, int]:
    """Forget all recorded traffic."""
    cleared = len(_traffic)
    _traffic.clear()
    return {"cleared": cleared}


# ─── MCP RESOURCES ────────────────────────────────────────────────────

@mcp.resource("ftp://session/status")
def resource_status() -> str:
    """Current session status."""
    return json.dumps(get_status())


@mcp.resource("ftp://session/traffic")
def resource_traffic() -> str:
    """Full recorded traffic log."""
    return json.dumps({"traffic": [entry.to_dict() for entry in _traffic.entries()]})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def explore_server(host: str) -> str:
    """Guide the AI through probing an FTP server's capabilities.

    Args:
        host: Server to probe.
    """
    return f"""Connect to {host} with the connect tool and look at the greeting.
Then, one command at a time with the execute tool:
- SYST to learn the server type
- FEAT to list extensions (a multi-line reply)
- If FEAT lists UTF8, send "OPTS UTF8 ON" and call change_encoding("utf-8")
- HELP for the supported command set

Report each reply code with its lines as returned. Finish with QUIT
and the disconnect tool."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
