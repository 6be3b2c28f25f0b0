TEXT_PLAIN = "text/plain; charset=UTF-8"
TEXT_HTML = "text/html; charset=UTF-8"


def send_all(sock, data):
    """Write every byte of ``data`` or report failure.

    A short write of zero bytes or a socket error aborts the transfer;
    nothing further is attempted on this socket.
    """
    view = memoryview(data)
    sent = 0
    while sent < len(view):
        try:
            n = sock.send(view[sent:])
        except OSError:
            return False
        if n <= 0:
            return False
        sent += n
    return True


def build_header(status, content_type, content_length):
    return (
        f"HTTP/1.1 {status}\r\n"
        f"Content-Type: {content_type}\r\n"
        f"Content-Length: {content_length}\r\n"
        "Connection: close\r\n\r\n"
    ).encode("ascii")


def send_binary_response(sock, status, content_type, body, head_only=False):
    header = build_header(status, content_type, len(body))
    if not send_all(sock, header):
        return False
    if head_only:
        return True
    return send_all(sock, body)


def send_response(sock, status, content_type, body, head_only=False):
    return send_binary_response(sock, status, content_type, body.encode("utf-8"), head_only)
