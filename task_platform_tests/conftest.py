"""
Shared fixtures: a local HTTP server that answers the token verification
request with a valid body, one byte at a time.
"""
import socketserver
import threading
import time

import pytest

TRICKLE_BODY = b'{"message": "Valid token.", "uid": "u1", "padding": "..................."}'
TRICKLE_INTERVAL = 0.2


class TrickleHandler(socketserver.BaseRequestHandler):
    def handle(self):
        request = b""
        while b"\r\n\r\n" not in request:
            data = self.request.recv(1024)
            if not data:
                return
            request += data

        head = (
            "HTTP/1.1 200 OK\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(TRICKLE_BODY)}\r\n"
            "Connection: close\r\n\r\n"
        ).encode()
        try:
            self.request.sendall(head)
            for i in range(len(TRICKLE_BODY)):
                self.request.sendall(TRICKLE_BODY[i:i + 1])
                time.sleep(TRICKLE_INTERVAL)
        except OSError:
            # Client hung up before the body was complete
            return


class TrickleServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True


@pytest.fixture
def trickle_auth_url():
    """URL of an auth server whose full answer takes ~15s to arrive."""
    server = TrickleServer(("127.0.0.1", 0), TrickleHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()
