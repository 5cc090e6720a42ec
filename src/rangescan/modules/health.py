"""Minimal HTTP liveness endpoint."""

import asyncio
import logging

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"


def _response(status: str, body: str) -> bytes:
    payload = body.encode()
    head = (
        f"HTTP/1.1 {status}\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        f"Content-Length: {len(payload)}\r\n"
        "Connection: close\r\n\r\n"
    )
    return head.encode() + payload


class HealthServer:
    """Answers GET /health with 200 OK; everything else gets 404."""

    def __init__(self, host: str = "0.0.0.0", port: int = 10001, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._server: asyncio.Server | None = None
        self.running = False

    @property
    def bound_port(self) -> int | None:
        """Actual listening port (useful when port 0 was requested)."""
        if not self._server or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        self.running = True
        logger.info("Health endpoint listening on %s:%s", self.host, self.bound_port)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self.running = False
        logger.info("Health endpoint stopped")

    async def serve(self, stop: asyncio.Event) -> None:
        """Run until stop is set."""
        await self.start()
        try:
            await stop.wait()
        finally:
            await self.stop()

    async def _handle_client(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        try:
            first_line = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
            parts = first_line.decode("utf-8", errors="replace").split()
            if len(parts) < 2:
                return
            method, path = parts[0].upper(), parts[1].split("?", 1)[0]
            # Drain request headers.
            while True:
                line = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
                if line in (b"\r\n", b"\n", b""):
                    break
            if method in ("GET", "HEAD") and path == HEALTH_PATH:
                writer.write(_response("200 OK", "ok"))
            else:
                writer.write(_response("404 Not Found", "not found"))
            await writer.drain()
        except (TimeoutError, ConnectionError, OSError):
            pass
        finally:
            writer.close()
