"""DocsetLibrary: installed docsets on disk and searching their indexes.

A docset is a `NAME.docset` bundle directly under the docsets directory.
Its search index is the SQLite database
`NAME.docset/Contents/Resources/docSet.dsidx`, in either the plain
`searchIndex` layout or the Core Data `ZTOKEN` layout. The library keeps no
state between calls besides its configuration, so it is safe to use from
any number of processes.
"""

import os
import re
import sqlite3
import urllib.request
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .utils import html_escape, logger

DOCSET_SUFFIX = '.docset'
INDEX_PATH = os.path.join('Contents', 'Resources', 'docSet.dsidx')
DOCUMENTS_PATH = os.path.join('Contents', 'Resources', 'Documents')

_DASH_ANCHOR = re.compile(r'<dash_entry_[^>]*>')

_SEARCH_INDEX_SQL = """
    SELECT name, type, path FROM searchIndex
    WHERE name LIKE ? ESCAPE '\\'
    ORDER BY length(name), name
"""

_CORE_DATA_SQL = """
    SELECT t.ZTOKENNAME AS name, ty.ZTYPENAME AS type,
           f.ZPATH || CASE WHEN m.ZANCHOR IS NULL OR m.ZANCHOR = ''
                           THEN '' ELSE '#' || m.ZANCHOR END AS path
    FROM ZTOKEN t
    JOIN ZTOKENTYPE ty ON t.ZTOKENTYPE = ty.Z_PK
    JOIN ZTOKENMETAINFORMATION m ON t.ZMETAINFORMATION = m.Z_PK
    JOIN ZFILEPATH f ON m.ZFILE = f.Z_PK
    WHERE t.ZTOKENNAME LIKE ? ESCAPE '\\'
    ORDER BY length(t.ZTOKENNAME), t.ZTOKENNAME
"""


class DocsetError(Exception):
    """Listing or searching docsets failed."""


class SearchHit(NamedTuple):
    name: str
    type: str
    docset: str
    url: str


def compile_patterns(docsets_filter: str, names: Iterable[str] = ()) -> List['re.Pattern']:
    """Split a filter on whitespace into case-insensitive regexes.

    An anchored word `^NAME$` that names one of `names` matches that docset
    exactly, even when NAME holds regex metacharacters (`C++`). A pattern
    that is not a valid regular expression matches literally.
    """
    exact = {n.lower() for n in names}
    patterns = []
    for word in docsets_filter.split():
        if len(word) > 2 and word[0] == '^' and word[-1] == '$' and word[1:-1].lower() in exact:
            patterns.append(re.compile('^' + re.escape(word[1:-1]) + '$', re.IGNORECASE))
            continue
        try:
            patterns.append(re.compile(word, re.IGNORECASE))
        except re.error:
            logger.debug('docset pattern %r is not a regex; matching literally', word)
            patterns.append(re.compile(re.escape(word), re.IGNORECASE))
    return patterns


def like_pattern(query: str) -> str:
    """Turn a free-text query into a SQL LIKE pattern; whitespace is a wildcard."""
    escaped = query.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    words = escaped.split()
    return '%' + '%'.join(words) + '%' if words else '%'


class DocsetLibrary:
    """Installed docsets under `docsets_dir`.

    Usage:
      library = DocsetLibrary('/path/to/docsets')
      library.list_docsets('python')      # ['Python_3']
      library.search('open file', 'python')
      found, fragment = library.search_html('open', '')
    """

    def __init__(self, docsets_dir: str, limit: Optional[int] = None):
        self.docsets_dir = docsets_dir
        self.limit = limit

    def docset_path(self, name: str) -> str:
        return os.path.join(self.docsets_dir, name + DOCSET_SUFFIX)

    def list_docsets(self, docsets_filter: str = '') -> List[str]:
        """Return sorted names of installed docsets matching the filter.

        An empty filter lists every installed docset; otherwise a name is
        listed when any of the filter's patterns matches it.
        """
        try:
            entries = os.listdir(self.docsets_dir)
        except FileNotFoundError:
            logger.debug('docsets directory %s does not exist', self.docsets_dir)
            return []
        except OSError as e:
            raise DocsetError(f'cannot list {self.docsets_dir}: {e}') from e

        names = sorted(
            fn[:-len(DOCSET_SUFFIX)] for fn in entries
            if fn.endswith(DOCSET_SUFFIX) and os.path.isdir(os.path.join(self.docsets_dir, fn))
        )
        patterns = compile_patterns(docsets_filter, names)
        if not patterns:
            return names
        return [n for n in names if any(p.search(n) for p in patterns)]

    def _query_index(self, index_file: str, pattern: str) -> List[sqlite3.Row]:
        uri = 'file:' + urllib.request.pathname2url(index_file) + '?mode=ro'
        conn = sqlite3.connect(uri, uri=True)
        try:
            conn.row_factory = sqlite3.Row
            tables = {r[0].lower() for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type IN ('table', 'view')")}
            sql = _SEARCH_INDEX_SQL if 'searchindex' in tables else _CORE_DATA_SQL
            if self.limit:
                sql += ' LIMIT %d' % self.limit
            return conn.execute(sql, (pattern,)).fetchall()
        finally:
            conn.close()

    def _document_url(self, name: str, path: str) -> str:
        path = _DASH_ANCHOR.sub('', path)
        if re.match(r'^[a-z][a-z0-9+.-]*://', path, re.IGNORECASE):
            return path
        path, _, fragment = path.partition('#')
        documents = os.path.join(self.docset_path(name), DOCUMENTS_PATH)
        url = 'file://' + urllib.request.pathname2url(os.path.join(documents, path))
        return url + '#' + fragment if fragment else url

    def search(self, query: str, docsets_filter: str = '') -> List[SearchHit]:
        """Search the indexes of every docset matching `docsets_filter`.

        Hits are ordered by docset name, then by name length and name.
        """
        pattern = like_pattern(query)
        hits: List[SearchHit] = []
        for name in self.list_docsets(docsets_filter):
            index_file = os.path.join(self.docset_path(name), INDEX_PATH)
            if not os.path.isfile(index_file):
                logger.warning('docset %s has no search index; skipping', name)
                continue
            try:
                rows = self._query_index(index_file, pattern)
            except sqlite3.Error as e:
                raise DocsetError(f'cannot search {index_file}: {e}') from e
            for row in rows:
                hits.append(SearchHit(row['name'] or '', row['type'] or '', name,
                                      self._document_url(name, row['path'] or '')))
        logger.debug('search %r in %r: %d hits', query, docsets_filter, len(hits))
        return hits

    def search_html(self, query: str, docsets_filter: str = '') -> Tuple[bool, str]:
        """Return (found, fragment) where fragment is an HTML list of hits."""
        hits = self.search(query, docsets_filter)
        if not hits:
            return False, ''
        items = ['<ul class="results">']
        for hit in hits:
            items.append(
                f'<li><a href="{html_escape(hit.url)}">{html_escape(hit.name)}</a>'
                f' <span class="type">{html_escape(hit.type)}</span>'
                f' <span class="docset">{html_escape(hit.docset)}</span></li>'
            )
        items.append('</ul>')
        return True, '\n'.join(items)
