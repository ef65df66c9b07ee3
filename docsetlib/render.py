"""Response rendering: one request in, one complete HTTP response out.

The page always carries status 200. Empty results and a missing docsets
directory are shown as notices inside the page; only a failing docset
library turns into a 500 response.
"""

from typing import BinaryIO, List

from .docsets import DocsetError
from .request import QueryParams, parse_query, read_request_target
from .selector import DocsetMenu, select_docsets
from .utils import html_escape, logger

CONTENT_TYPE = 'text/html'

STYLE = """
    body { font-family: sans-serif; line-height: 1.5; margin: 0 auto; max-width: 60em; padding: 1em; }
    form { display: flex; flex-wrap: wrap; gap: 0.5em; align-items: flex-start; }
    input[name=query] { flex: 1 1 20em; }
    select { min-width: 12em; }
    option.ignored { color: #999; }
    .notice { color: #666; font-style: italic; }
    .results .type, .results .docset { color: #666; font-size: 0.9em; }
"""


def render_title(params: QueryParams) -> str:
    parts = [p for p in (params.escaped_query, params.escaped_docsets) if p]
    return ' - '.join(parts + ['docset search'])


def render_form(params: QueryParams, menu: DocsetMenu) -> str:
    html = ['<form action="/" method="get">']
    html.append(f'<input type="search" name="query" value="{params.escaped_query}" '
                f'placeholder="search pattern" autofocus>')
    html.append(f'<input type="text" name="docsets" value="{params.escaped_docsets}" '
                f'placeholder="docsets pattern">')
    if len(menu):
        html.append(f'<select name="docsets" multiple size="{min(len(menu), 10)}">')
        for entry in menu:
            name = html_escape(entry.name)
            value = html_escape('^' + entry.name + '$')
            if entry.matched or not menu.highlight_ignored:
                html.append(f'<option value="{value}">{name}</option>')
            else:
                html.append(f'<option value="{value}" class="ignored">{name}</option>')
        html.append('</select>')
    html.append('<input type="submit" value="Search">')
    html.append('</form>')
    html.append(f'<p class="summary">matched {menu.matched_count} out of {menu.total_count} docsets</p>')
    return '\n'.join(html)


def render_results(params: QueryParams, menu: DocsetMenu, library) -> str:
    if menu.total_count == 0:
        return (f'<p class="notice">No docsets are installed, so none can match '
                f'&quot;{params.escaped_docsets}&quot;.</p>')

    found, fragment = library.search_html(params.query, params.docsets)
    if found:
        return fragment
    docsets = params.escaped_docsets or '.'
    return (f'<p class="notice">No results for &quot;{params.escaped_query}&quot; '
            f'in docsets matching &quot;{docsets}&quot;.</p>')


def render_page(params: QueryParams, library) -> str:
    """Render the HTML document for `params`, consulting `library` for
    docset listings and search results."""
    menu = select_docsets(library, params.docsets)
    html: List[str] = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '<meta charset="utf-8">',
        f'<title>{render_title(params)}</title>',
        f'<style>{STYLE}</style>',
        '</head>',
        '<body>',
        render_form(params, menu),
        render_results(params, menu, library),
        '</body>',
        '</html>',
    ]
    return '\n'.join(html) + '\n'


def http_response(status: str, body: str) -> bytes:
    head = f'HTTP/1.0 {status}\r\nContent-Type: {CONTENT_TYPE}\r\n\r\n'
    return (head + body).encode('utf-8')


def render_error_page(message: str) -> str:
    return '\n'.join([
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head><meta charset="utf-8"><title>docset search error</title></head>',
        f'<body><p class="error">{html_escape(message)}</p></body>',
        '</html>',
    ]) + '\n'


def build_response(target: str, library) -> bytes:
    """Return the full HTTP response for a request target."""
    params = parse_query(target)
    try:
        body = render_page(params, library)
    except DocsetError as e:
        logger.exception('docset library failed for %r', target)
        return http_response('500 Internal Server Error', render_error_page(str(e)))
    return http_response('200 OK', body)


def respond(rfile: BinaryIO, wfile: BinaryIO, library) -> str:
    """Read one request from `rfile` and write its response to `wfile`.

    Returns the request target ('' when the request was not understood).
    """
    target = read_request_target(rfile)
    wfile.write(build_response(target, library))
    wfile.flush()
    return target
