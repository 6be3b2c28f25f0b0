import html
import logging
from collections import namedtuple

from shotserver.response import TEXT_HTML, TEXT_PLAIN, send_binary_response, send_response
from shotserver.utils import FileLoader, FileStatus, MimeTypes, Screenshots

logger = logging.getLogger(__name__)

OK = "200 OK"
NOT_FOUND = "404 Not Found"
METHOD_NOT_ALLOWED = "405 Method Not Allowed"
SERVER_ERROR = "500 Internal Server Error"

Request = namedtuple("Request", ["method", "path"])
Route = namedtuple("Route", ["path", "handler"])


def parse_request(raw):
    """Take method and path from the first two ASCII-whitespace-separated fields.

    Headers and body are never looked at; missing fields come back empty.
    """
    fields = [field.decode("latin-1") for field in raw.split(None, 2)]
    method = fields[0] if len(fields) > 0 else ""
    path = fields[1] if len(fields) > 1 else ""
    return Request(method, path)


class FileIndexPage:
    def __init__(self, index_file):
        self.index_file = index_file

    def render(self):
        result = FileLoader.read(self.index_file)
        if result.status is not FileStatus.OK:
            return None
        return result.data


class SynthesizedIndexPage:
    TEMPLATE = (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        "<title>Agartha Online</title>\n"
        "</head>\n"
        "<body>\n"
        "<h1>Agartha Online</h1>\n"
        "{content}\n"
        "</body>\n"
        "</html>\n"
    )

    def __init__(self, screenshot_dir):
        self.screenshot_dir = screenshot_dir

    def render(self):
        latest = Screenshots.latest(self.screenshot_dir)
        if latest is None:
            content = "<p>No screenshots available yet.</p>"
        else:
            alt = html.escape(latest.replace("\\", "/").rsplit("/", 1)[-1])
            content = (
                '<a href="/latest-image">'
                f'<img src="/latest-image" alt="{alt}" style="max-width: 100%;">'
                "</a>"
            )
        return self.TEMPLATE.format(content=content).encode("utf-8")


def make_index_page(config):
    if config.index_mode == "synthesized":
        return SynthesizedIndexPage(config.screenshot_dir)
    return FileIndexPage(config.index_file)


class RequestHandler:
    """Answers exactly one request per connection from a fixed route table."""

    def __init__(self, config):
        self.config = config
        self.index_page = make_index_page(config)

        routes = [
            Route("/", self.serve_index),
            Route("/index.html", self.serve_index),
            Route("/latest-image", self.serve_latest),
        ]
        routes += [Route(path, self.serve_favicon) for path in config.favicon_paths]
        routes += [Route(path, self.serve_pinned) for path in config.pinned_paths]
        self.routes = tuple(routes)
        self._lookup = {route.path: route.handler for route in self.routes}

    def __call__(self, conn):
        self.handle(conn)

    def handle(self, conn):
        try:
            try:
                raw = conn.recv(self.config.recv_size)
            except OSError:
                return
            if not raw:
                return

            request = parse_request(raw)
            self.dispatch(conn, request)
        except Exception:
            logger.exception("Unhandled error while serving request")
        finally:
            conn.close()

    def dispatch(self, conn, request):
        head_only = request.method == "HEAD"
        if not head_only and request.method != "GET":
            return send_response(conn, METHOD_NOT_ALLOWED, TEXT_PLAIN, "Method Not Allowed\n")

        handler = self._lookup.get(request.path)
        if handler is None:
            return send_response(conn, NOT_FOUND, TEXT_PLAIN, "Not Found\n", head_only)
        return handler(conn, head_only)

    def serve_index(self, conn, head_only):
        page = self.index_page.render()
        if page is None:
            return send_response(conn, SERVER_ERROR, TEXT_PLAIN, "Failed to load index\n", head_only)
        return send_binary_response(conn, OK, TEXT_HTML, page, head_only)

    def serve_favicon(self, conn, head_only):
        return self.serve_file(
            conn, self.config.favicon_file, head_only,
            missing="Favicon missing\n",
            unreadable="Failed to open favicon\n",
        )

    def serve_pinned(self, conn, head_only):
        return self.serve_file(
            conn, self.config.pinned_file, head_only,
            missing="Pinned screenshot missing\n",
            unreadable="Failed to open pinned screenshot\n",
        )

    def serve_latest(self, conn, head_only):
        latest = Screenshots.latest(self.config.screenshot_dir)
        if latest is None:
            return send_response(conn, NOT_FOUND, TEXT_PLAIN, "No screenshots available\n", head_only)

        # a file that vanished after the scan counts as unopenable
        result = FileLoader.read(latest)
        if result.status is not FileStatus.OK:
            return send_response(conn, SERVER_ERROR, TEXT_PLAIN, "Failed to open screenshot\n", head_only)
        return send_binary_response(conn, OK, MimeTypes.guess(latest), result.data, head_only)

    def serve_file(self, conn, path, head_only, missing, unreadable):
        result = FileLoader.read(path)
        if result.status is FileStatus.MISSING:
            return send_response(conn, NOT_FOUND, TEXT_PLAIN, missing, head_only)
        if result.status is FileStatus.UNREADABLE:
            return send_response(conn, SERVER_ERROR, TEXT_PLAIN, unreadable, head_only)
        return send_binary_response(conn, OK, MimeTypes.guess(path), result.data, head_only)
