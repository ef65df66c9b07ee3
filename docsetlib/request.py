"""Request line reading and query string decoding.

Only the request line of a GET request is interpreted. Headers are read
and dropped, and anything that does not look like `GET <target> HTTP/1.x`
simply leaves the target empty so a default page can still be rendered.
"""

import re
import urllib.parse
from typing import BinaryIO, Dict, List

from .utils import html_escape, logger

REQUEST_LINE = re.compile(r'^GET (\S+) HTTP/1\.\d+\r?$')

# Only these names survive decoding.
ACCEPTED_PARAMS = ('query', 'docsets')


def read_request_target(rfile: BinaryIO) -> str:
    """Return the target of the first GET request line in `rfile`.

    Lines are consumed up to and including the first empty line (the end
    of the headers) or the end of the stream. Returns '' when no GET
    request line was seen.
    """
    target = ''
    seen_request = False
    for raw in iter(rfile.readline, b''):
        line = raw.decode('latin-1').rstrip('\n')
        if line.rstrip('\r') == '':
            break
        if seen_request:
            continue
        m = REQUEST_LINE.match(line)
        if m:
            target = m.group(1)
            seen_request = True
        else:
            logger.debug('ignoring line %r', line)
    return target


def decode_value(value: str) -> str:
    """Decode a form value: '+' becomes a space, then %XX becomes a byte.

    Malformed escapes are left as they are. The decoded bytes are read as
    UTF-8; bytes that are not valid UTF-8 become U+FFFD, so the value is
    always plain text.
    """
    return urllib.parse.unquote(value.replace('+', ' '), encoding='utf-8', errors='replace')


class QueryParams:
    """Decoded `query` and `docsets` values of one request.

    Repeated names accumulate: every non-empty occurrence is appended,
    separated by a single space. The docset menu relies on this, since each
    selected option arrives as its own `docsets=` pair. Empty occurrences are
    the one exception: they are dropped rather than joined, so the empty
    text field sent next to the menu adds no stray space.
    """

    def __init__(self, query: str = '', docsets: str = ''):
        self.query = query
        self.docsets = docsets

    @property
    def escaped_query(self) -> str:
        return html_escape(self.query)

    @property
    def escaped_docsets(self) -> str:
        return html_escape(self.docsets)

    def as_dict(self) -> Dict[str, str]:
        return {'query': self.query, 'docsets': self.docsets}

    def __eq__(self, other):
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return f'QueryParams(query={self.query!r}, docsets={self.docsets!r})'


def parse_query(target: str) -> QueryParams:
    """Decode the whitelisted parameters from a request target."""
    _, sep, rest = target.partition('?')
    values: Dict[str, List[str]] = {name: [] for name in ACCEPTED_PARAMS}
    if not sep:
        return QueryParams()

    for segment in re.split(r'[?&]', rest):
        if not segment:
            continue
        name, _, value = segment.partition('=')
        if name not in values:
            logger.debug('dropping parameter %r', name)
            continue
        decoded = decode_value(value)
        if decoded:
            values[name].append(decoded)

    return QueryParams(**{name: ' '.join(parts) for name, parts in values.items()})
