"""
Unit tests for the per-connection request/response cycle.
"""

import logging
import socket

from webworker.core.connection import Connection, ConnectionState
from webworker.handlers.connection_handler import ConnectionHandler
from webworker.handlers.static import ResourceLocator
from webworker.http.response import NOT_FOUND_BODY, ResponseWriter


class RecordingLocator(ResourceLocator):
    """Remembers every resource it hands out."""

    def __init__(self):
        self.opened = []

    def locate(self, path):
        resource = super().locate(path)
        self.opened.append(resource)
        return resource


def split_response(raw: bytes):
    head, _, body = raw.partition(b"\n\n")
    status_line, _, headers = head.partition(b"\n")
    return status_line.decode(), headers.decode(), body


class TestConnectionHandler:
    """End-to-end cycle over a socket pair."""

    def test_template_page(self, exchange, fixed_date_string: str):
        raw = exchange(b"GET /index.html HTTP/1.1\r\nHost: test\r\n\r\n")
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 200 OK"
        assert headers == "Content-Type: text/html"
        assert body.startswith(b"<html><head><title>Test Server</title>")
        assert fixed_date_string.encode() in body
        assert b"Test Server</cs371server>" in body
        assert b"<cs371date>" not in body
        assert b"<cs371server>" not in body

    def test_missing_page(self, exchange):
        raw = exchange(b"GET /missing.html HTTP/1.1\r\n\r\n")
        status_line, headers, body = split_response(raw)

        assert status_line == "HTTP/1.1 404 File Not Found"
        assert headers.startswith("Content-Type: ")
        assert body == NOT_FOUND_BODY

    def test_only_two_header_lines(self, exchange):
        raw = exchange(b"GET /plain.html HTTP/1.1\r\n\r\n")
        head = raw.split(b"\n\n", 1)[0]

        assert head == b"HTTP/1.1 200 OK\nContent-Type: text/html"

    def test_image_served_verbatim(self, exchange, png_bytes: bytes):
        raw = exchange(b"GET /images/logo.png HTTP/1.1\r\n\r\n")

        assert raw == b"HTTP/1.1 200 OK\nContent-Type: image/png\n\n" + png_bytes

    def test_image_served_identically_twice(self, exchange):
        first = exchange(b"GET /images/logo.png HTTP/1.1\r\n\r\n")
        second = exchange(b"GET /images/logo.png HTTP/1.1\r\n\r\n")

        assert first == second

    def test_favicon_content_type(self, exchange):
        raw = exchange(b"GET /images/favicon.ico HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 200 OK\nContent-Type: image/x-con\n\n")
        assert raw.endswith(b"<cs371date>")

    def test_empty_template_file(self, exchange):
        raw = exchange(b"GET /empty.html HTTP/1.1\r\n\r\n")
        assert raw == b"HTTP/1.1 200 OK\nContent-Type: text/html\n\n"

    def test_non_ascii_file_name(self, exchange, doc_root):
        (doc_root / "café.html").write_bytes(b"<p>menu</p>")
        raw = exchange("GET /café.html HTTP/1.1\r\n\r\n".encode("utf-8"))

        assert raw.startswith(b"HTTP/1.1 200 OK\nContent-Type: text/html\n\n")
        assert raw.endswith(b"<p>menu</p>")

    def test_directory_request_is_404(self, exchange):
        status_line, _, body = split_response(exchange(b"GET /images HTTP/1.1\r\n\r\n"))

        assert status_line == "HTTP/1.1 404 File Not Found"
        assert body == NOT_FOUND_BODY

    def test_parse_error_writes_nothing(self, exchange, caplog):
        with caplog.at_level(logging.WARNING, logger="webworker"):
            raw = exchange(b"GET\r\n\r\n")

        assert raw == b""
        assert "Bad request" in caplog.text

    def test_empty_request_writes_nothing(self, exchange):
        assert exchange(b"") == b""

    def test_unexpected_error_is_contained(self, exchange, config, caplog):
        class ExplodingWriter(ResponseWriter):
            def write_body(self, out, resource):
                raise RuntimeError("boom")

        handler = ConnectionHandler(config, writer=ExplodingWriter(server_name="x"))

        with caplog.at_level(logging.ERROR, logger="webworker"):
            raw = exchange(b"GET /index.html HTTP/1.1\r\n\r\n", handler)

        assert raw.startswith(b"HTTP/1.1 200 OK\n")
        assert "Unexpected error" in caplog.text


class TestResourceRelease:
    """The open file and the connection are released on every path."""

    def _run(self, handler: ConnectionHandler, raw_request: bytes):
        server_sock, client_sock = socket.socketpair()
        with client_sock:
            client_sock.sendall(raw_request)
            client_sock.shutdown(socket.SHUT_WR)
            conn = Connection(socket=server_sock, address=("127.0.0.1", 1), timeout=5.0)
            handler.handle(conn)
        return conn

    def test_resource_closed_after_success(self, config):
        locator = RecordingLocator()
        handler = ConnectionHandler(config, locator=locator)
        conn = self._run(handler, b"GET /index.html HTTP/1.1\r\n\r\n")

        assert locator.opened[0].found
        assert locator.opened[0].closed
        assert conn.state is ConnectionState.CLOSED

    def test_resource_closed_after_transport_error(self, config, caplog):
        locator = RecordingLocator()

        class BrokenPipeWriter(ResponseWriter):
            def write_header(self, out, resource):
                raise BrokenPipeError("client went away")

        handler = ConnectionHandler(
            config,
            locator=locator,
            writer=BrokenPipeWriter(server_name="x"),
        )

        with caplog.at_level(logging.WARNING, logger="webworker"):
            conn = self._run(handler, b"GET /index.html HTTP/1.1\r\n\r\n")

        assert locator.opened[0].closed
        assert conn.state is ConnectionState.CLOSED
        assert "Transport error" in caplog.text

    def test_connection_closed_after_parse_error(self, config):
        conn = self._run(ConnectionHandler(config), b"NOPE\r\n\r\n")
        assert conn.state is ConnectionState.CLOSED


class TestConnection:
    """Tests for the Connection wrapper."""

    def test_streams_and_close(self):
        server_sock, client_sock = socket.socketpair()
        with client_sock:
            conn = Connection(socket=server_sock, address=("127.0.0.1", 1), timeout=5.0)
            assert conn.state is ConnectionState.NEW

            client_sock.sendall(b"ping\n")
            assert conn.input.readline() == b"ping\n"
            assert conn.state is ConnectionState.READING

            conn.output.write(b"pong")
            conn.flush()
            assert client_sock.recv(4) == b"pong"

            client_sock.shutdown(socket.SHUT_WR)
            with conn:
                pass

            assert conn.state is ConnectionState.CLOSED
            conn.close()  # Second close is a no-op

    def test_client_ip(self):
        server_sock, client_sock = socket.socketpair()
        with server_sock, client_sock:
            conn = Connection(socket=server_sock, address=("10.0.0.7", 4242))
            assert conn.client_ip == "10.0.0.7"
