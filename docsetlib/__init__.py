"""docsetlib - search page and tools for locally installed docsets

This package provides:
- DocsetLibrary: lists installed docsets and searches their SQLite indexes
- select_docsets: compares installed docsets with a filter into a menu
- parse_query / read_request_target: minimal GET request decoding
- build_response / respond: renders one request into a full HTML response
- serve: forking TCP server, one process per connection
"""

from .docsets import DocsetError, DocsetLibrary, SearchHit
from .render import build_response, respond
from .request import QueryParams, parse_query, read_request_target
from .selector import DocsetEntry, DocsetMenu, select_docsets
from .server import serve
from .utils import html_escape

__all__ = [
    "DocsetError", "DocsetLibrary", "SearchHit",
    "build_response", "respond",
    "QueryParams", "parse_query", "read_request_target",
    "DocsetEntry", "DocsetMenu", "select_docsets",
    "serve", "html_escape",
]
__version__ = "0.1.0"
