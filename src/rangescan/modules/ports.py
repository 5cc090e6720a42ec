"""Port list parsing."""

MIN_PORT = 1
MAX_PORT = 65535


def parse_ports(text: str | None) -> list[int]:
    """
    Parse a comma-separated port list.

    Tokens that are not integers or fall outside 1-65535 are dropped
    silently. Order and duplicates are preserved. Empty input gives [].
    """
    if not text:
        return []
    ports: list[int] = []
    for token in text.split(","):
        try:
            port = int(token.strip())
        except ValueError:
            continue
        if MIN_PORT <= port <= MAX_PORT:
            ports.append(port)
    return ports


def format_ports(ports: list[int]) -> str:
    """Render a port list back to its comma-separated form."""
    return ",".join(str(port) for port in ports)
