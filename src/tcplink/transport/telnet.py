"""
Minimal TELNET option negotiation sent once after connecting.

Some line-oriented devices only start talking after seeing a telnet client
announce itself. The sequence is fixed: no option replies are parsed.
"""

from tcplink.transport.protocol import Connection

IAC = 255
DO = 253
DONT = 254

ECHO = 1
SUPPRESS_GO_AHEAD = 3
LINEMODE = 34

TELNET_HANDSHAKE = bytes([
    IAC, DO, ECHO,
    IAC, DO, SUPPRESS_GO_AHEAD,
    IAC, DONT, LINEMODE,
])


async def send_telnet_handshake(connection: Connection) -> int:
    """Write the fixed negotiation sequence to ``connection``.

    Returns:
        The number of bytes written.

    Raises:
        WriteError: If the write fails.
    """
    return await connection.write(TELNET_HANDSHAKE)
