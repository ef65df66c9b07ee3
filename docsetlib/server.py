"""Network harness: one forked process per connection.

The harness owns sockets and processes; each connection gets a fresh child
that reads one request, writes one response and exits. Nothing is shared
between requests.
"""

import socketserver
import sys

from .docsets import DocsetLibrary
from .render import respond
from .utils import logger

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 54321


class RequestHandler(socketserver.StreamRequestHandler):

    def handle(self):
        target = respond(self.rfile, self.wfile, self.server.library)
        logger.info('%s GET %s', self.client_address[0], target or '-')


class DocsetServer(socketserver.ForkingTCPServer):
    allow_reuse_address = True

    def __init__(self, server_address, library: DocsetLibrary):
        self.library = library
        super().__init__(server_address, RequestHandler)

    def handle_error(self, request, client_address):
        logger.exception('request from %s failed', client_address[0])


def serve(library: DocsetLibrary, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
    with DocsetServer((host, port), library) as httpd:
        sa = httpd.socket.getsockname()
        print(f'Serving docsets from {library.docsets_dir} on http://{sa[0]}:{sa[1]}/ ...')
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print('\nShutting down...')


def respond_stdio(library: DocsetLibrary) -> str:
    """Answer a single request read from stdin on stdout (inetd style)."""
    return respond(sys.stdin.buffer, sys.stdout.buffer, library)
