#!/usr/bin/env python3
"""
Hello server.

Answers every request, whatever the method or path, with a fixed plaintext
message on 0.0.0.0:8080.
"""
from http.server import HTTPServer, BaseHTTPRequestHandler
from socketserver import ThreadingMixIn
import logging
import sys

MESSAGE = "Hello, Multistage Docker Build!"
LISTEN_ADDRESS = ("0.0.0.0", 8080)
DRAIN_READ_SIZE = 64 * 1024

logger = logging.getLogger("hello_server")


class HelloHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    _body = MESSAGE.encode("utf-8")

    def __getattr__(self, name):
        # BaseHTTPRequestHandler looks up do_<METHOD>; every verb gets the same answer
        if name.startswith("do_"):
            return self._send_message
        raise AttributeError(name)

    def _send_message(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(self._body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(self._body)
        self.wfile.flush()
        self._discard_body()

    def _discard_body(self):
        """Consume the request body so a kept-alive connection stays in sync."""
        try:
            if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
                complete = self._discard_chunks()
            else:
                length = int(self.headers.get("Content-Length", 0))
                complete = length >= 0 and self._skip(length)
        except ValueError:
            complete = False
        if not complete:
            # Framing is broken or the peer hung up, the stream can't be reused
            self.close_connection = True

    def _discard_chunks(self):
        while True:
            line = self.rfile.readline(DRAIN_READ_SIZE)
            size = int(line.split(b";", 1)[0].strip(), 16)
            if size < 0:
                return False
            if size == 0:
                break
            if not self._skip(size + 2):  # chunk data + CRLF
                return False
        # Trailer section ends with an empty line
        while True:
            line = self.rfile.readline(DRAIN_READ_SIZE)
            if not line:
                return False
            if line in (b"\r\n", b"\n"):
                return True

    def _skip(self, count):
        """Read and drop count bytes without buffering them all. False on early EOF."""
        while count > 0:
            data = self.rfile.read(min(count, DRAIN_READ_SIZE))
            if not data:
                return False
            count -= len(data)
        return True

    def log_message(self, format, *args):
        pass  # No per-request logging


class ThreadedHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True


def make_server(address=LISTEN_ADDRESS):
    """Bind the listener. Raises OSError if the address cannot be bound."""
    return ThreadedHTTPServer(address, HelloHandler)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )
    logger.info("Starting server on :%d...", LISTEN_ADDRESS[1])
    try:
        server = make_server()
    except OSError as exc:
        logger.critical("listen tcp :%d: %s", LISTEN_ADDRESS[1], exc)
        sys.exit(1)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
