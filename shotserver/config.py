"""Server configuration.

ServerConfig is built once at startup and handed to the request handler;
handlers only ever read it.
"""

import re
from dataclasses import dataclass
from urllib.parse import quote

import click

DEFAULT_PORT = 80
INDEX_MODES = ("file", "synthesized")
PORT_PREFIX = re.compile(r"\s*[+-]?[0-9]+", re.ASCII)


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    backlog: int = 16

    # Filesystem collaborators, relative to the working directory
    screenshot_dir: str = "screenshots"
    favicon_file: str = "favicon.png"
    pinned_file: str = "18-12-2025 19-23-43.png"
    index_file: str = "index.html"

    # "file" serves index_file, "synthesized" builds the page inline
    index_mode: str = "file"

    recv_size: int = 4096

    def __post_init__(self):
        if self.index_mode not in INDEX_MODES:
            raise ValueError(f"index_mode must be one of {INDEX_MODES}, got {self.index_mode!r}")

    @property
    def favicon_paths(self):
        return ("/favicon.png", "/favicon.ico")

    @property
    def pinned_paths(self):
        name = self.pinned_file.replace("\\", "/").rsplit("/", 1)[-1]
        encoded = "/" + quote(name)
        raw = "/" + name
        if encoded == raw:
            return (raw,)
        return (encoded, raw)


def resolve_port(cli_value=None, environ=None):
    """Pick the listening port: CLI argument, then $PORT, then 80.

    Leading digits are taken and trailing text ignored, so "8080x" is 8080.
    Anything without a leading integer in [1, 65535] falls back to 80 with a
    warning on stderr.
    """
    if cli_value is not None:
        port_str = cli_value
    elif environ is not None and environ.get("PORT") is not None:
        port_str = environ["PORT"]
    else:
        port_str = str(DEFAULT_PORT)

    try:
        match = PORT_PREFIX.match(port_str)
        if match is None:
            raise ValueError("no leading integer")
        port = int(match.group())
        if port < 1 or port > 65535:
            raise ValueError("port out of range")
        return port
    except ValueError as e:
        click.echo(
            click.style(f"Invalid port value '{port_str}': {e}, falling back to {DEFAULT_PORT}", fg="yellow"),
            err=True,
        )
        return DEFAULT_PORT
