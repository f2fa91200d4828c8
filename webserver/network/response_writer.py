"""Response framing and transmission."""

from asyncio import StreamWriter

from ..protocol.messages import Response
from ..protocol.parser import ProtocolParser


class ResponseWriter:
    """Frame Response objects and write them to a client stream."""

    def __init__(self, parser: ProtocolParser = None):
        self.parser = parser if parser is not None else ProtocolParser()

    async def send(self, writer: StreamWriter, response: Response) -> int:
        """
        Send a complete response.

        Returns:
            Number of bytes written
        """
        payload = self.parser.format_response(response)
        writer.write(payload)
        await writer.drain()
        return len(payload)
