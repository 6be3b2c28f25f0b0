import os
import sys
import signal
import socket
import logging
import threading

import click

from shotserver.config import ServerConfig, resolve_port
from shotserver.handler import RequestHandler

logger = logging.getLogger(__name__)


class ServerSetupError(Exception):
    def __init__(self, step, error):
        super().__init__(f"{step}: {error}")
        self.step = step
        self.error = error


class ThreadSpawner:
    """Runs every connection on its own detached daemon thread."""

    def spawn(self, target, *args):
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        return thread


class HTTPServer:
    def __init__(self, config, handler=None, spawner=None):
        self.config = config
        self.handler = handler or RequestHandler(config)
        self.spawner = spawner or ThreadSpawner()
        self._running = False
        self.sock = self._listen()

    def _listen(self):
        step = "socket"
        sock = None
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            step = "setsockopt"
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            step = "bind"
            sock.bind((self.config.host, self.config.port))
            step = "listen"
            sock.listen(self.config.backlog)
        except OSError as e:
            if sock is not None:
                sock.close()
            raise ServerSetupError(step, e) from e
        return sock

    @property
    def port(self):
        return self.sock.getsockname()[1]

    def start(self):
        self._running = True
        while self._running:
            try:
                conn, _ = self.sock.accept()
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"accept: {e}")
                continue
            self.spawner.spawn(self.handler, conn)

    def shutdown(self):
        self._running = False
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


def ignore_sigpipe():
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_IGN)


@click.command()
@click.argument("port", required=False)
def main(port):
    """Serve the newest screenshot over HTTP on PORT (default: $PORT or 80)."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    ignore_sigpipe()

    config = ServerConfig(port=resolve_port(port, os.environ))
    try:
        server = HTTPServer(config)
    except ServerSetupError as e:
        click.echo(click.style(str(e), fg='bright_red', bold=True), err=True)
        sys.exit(1)

    click.echo(click.style(f"Agartha Online HTTP server listening on port {config.port}", fg='bright_green'))
    click.echo(f"Serving latest screenshot from {os.path.abspath(config.screenshot_dir)}")
    server.start()


if __name__ == "__main__":
    main()
