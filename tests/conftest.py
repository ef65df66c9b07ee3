import os
import sqlite3

import pytest

from docsetlib.docsets import DocsetLibrary


class FakeLibrary:
    """In-memory stand-in for DocsetLibrary that records its calls."""

    def __init__(self, installed, filtered=None, results=None):
        self.installed = list(installed)
        self.filtered = filtered or {}
        self.results = results or {}
        self.list_calls = []
        self.search_calls = []

    def list_docsets(self, docsets_filter=''):
        self.list_calls.append(docsets_filter)
        if not docsets_filter:
            return list(self.installed)
        return list(self.filtered.get(docsets_filter, []))

    def search_html(self, query, docsets_filter=''):
        self.search_calls.append((query, docsets_filter))
        fragment = self.results.get(query)
        return (True, fragment) if fragment else (False, '')


def make_docset(root, name, rows):
    """Create NAME.docset under root with a searchIndex table holding rows."""
    resources = os.path.join(root, name + '.docset', 'Contents', 'Resources')
    os.makedirs(os.path.join(resources, 'Documents'))
    conn = sqlite3.connect(os.path.join(resources, 'docSet.dsidx'))
    with conn:
        conn.execute('CREATE TABLE searchIndex(id INTEGER PRIMARY KEY, name TEXT, type TEXT, path TEXT)')
        conn.executemany('INSERT INTO searchIndex(name, type, path) VALUES (?, ?, ?)', rows)
    conn.close()


def make_core_data_docset(root, name, rows):
    """Create NAME.docset using the ZTOKEN tables; rows are (name, type, path, anchor)."""
    resources = os.path.join(root, name + '.docset', 'Contents', 'Resources')
    os.makedirs(os.path.join(resources, 'Documents'))
    conn = sqlite3.connect(os.path.join(resources, 'docSet.dsidx'))
    with conn:
        conn.execute('CREATE TABLE ZTOKENTYPE(Z_PK INTEGER PRIMARY KEY, ZTYPENAME TEXT)')
        conn.execute('CREATE TABLE ZFILEPATH(Z_PK INTEGER PRIMARY KEY, ZPATH TEXT)')
        conn.execute('CREATE TABLE ZTOKENMETAINFORMATION(Z_PK INTEGER PRIMARY KEY, ZFILE INTEGER, ZANCHOR TEXT)')
        conn.execute('CREATE TABLE ZTOKEN(Z_PK INTEGER PRIMARY KEY, ZTOKENNAME TEXT, ZTOKENTYPE INTEGER, ZMETAINFORMATION INTEGER)')
        for pk, (tok, typ, path, anchor) in enumerate(rows, start=1):
            conn.execute('INSERT INTO ZTOKENTYPE VALUES (?, ?)', (pk, typ))
            conn.execute('INSERT INTO ZFILEPATH VALUES (?, ?)', (pk, path))
            conn.execute('INSERT INTO ZTOKENMETAINFORMATION VALUES (?, ?, ?)', (pk, pk, anchor))
            conn.execute('INSERT INTO ZTOKEN VALUES (?, ?, ?, ?)', (pk, tok, pk, pk))
    conn.close()


@pytest.fixture
def docsets_dir(tmp_path):
    root = str(tmp_path / 'docsets')
    os.makedirs(root)
    make_docset(root, 'Python_3', [
        ('open', 'Function', 'library/functions.html#open'),
        ('os.open', 'Function', 'library/os.html#os.open'),
        ('opener', 'Guide', '<dash_entry_name=opener>howto/opener.html'),
        ('print', 'Function', 'library/functions.html#print'),
        ('100%_done', 'Guide', 'done.html'),
    ])
    make_docset(root, 'Ruby', [
        ('File.open', 'Method', 'File.html#method-c-open'),
        ('puts', 'Method', 'Kernel.html#method-i-puts'),
    ])
    make_core_data_docset(root, 'Go', [
        ('os.Open', 'Function', 'os/index.html', 'Open'),
        ('fmt.Println', 'Function', 'fmt/index.html', ''),
    ])
    return root


@pytest.fixture
def library(docsets_dir):
    return DocsetLibrary(docsets_dir)
