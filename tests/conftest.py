"""Shared fixtures: a throwaway site directory and a live server on it."""

import os
import socket
import threading

import pytest

from shotserver.config import ServerConfig
from shotserver.server import HTTPServer

PINNED_NAME = "18-12-2025 19-23-43.png"


@pytest.fixture
def site(tmp_path):
    """Directory layout the server expects, with an empty screenshot dir."""
    (tmp_path / "screenshots").mkdir()
    return tmp_path


@pytest.fixture
def make_config(site):
    def factory(**overrides):
        values = {
            "host": "127.0.0.1",
            "port": 0,
            "screenshot_dir": str(site / "screenshots"),
            "favicon_file": str(site / "favicon.png"),
            "pinned_file": str(site / PINNED_NAME),
            "index_file": str(site / "index.html"),
        }
        values.update(overrides)
        return ServerConfig(**values)

    return factory


@pytest.fixture
def live_server(make_config):
    """Start an HTTPServer on an ephemeral port; returns a starter function."""
    servers = []

    def start(**overrides):
        server = HTTPServer(make_config(**overrides))
        thread = threading.Thread(target=server.start, daemon=True)
        thread.start()
        servers.append((server, thread))
        return server

    yield start

    for server, thread in servers:
        server.shutdown()
        thread.join(timeout=5)


def write_file(path, data, mtime=None):
    path.write_bytes(data)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def raw_exchange(port, payload, host="127.0.0.1"):
    """Send ``payload`` on a fresh connection and read until the server closes."""
    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(payload)
        return read_until_closed(sock)


def read_until_closed(sock):
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw):
    """Return (status line, header dict, body) for a raw HTTP response."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("ascii").split("\r\n")
    headers = {}
    for line in lines[1:]:
        key, value = line.split(": ", 1)
        headers[key] = value
    return lines[0], headers, body
