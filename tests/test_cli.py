import os

from docsetlib import cli


def test_docsets_lists_names(docsets_dir, capsys):
    assert cli.main(['--docsets-dir', docsets_dir, 'docsets']) == 0
    assert capsys.readouterr().out.split() == ['Go', 'Python_3', 'Ruby']


def test_docsets_with_patterns(docsets_dir, capsys):
    assert cli.main(['--docsets-dir', docsets_dir, 'docsets', 'go', 'ruby']) == 0
    assert capsys.readouterr().out.split() == ['Go', 'Ruby']


def test_docsets_dir_from_environment(docsets_dir, monkeypatch, capsys):
    monkeypatch.setenv('DOCSETS_DIR', docsets_dir)
    assert cli.main(['docsets', 'python']) == 0
    assert capsys.readouterr().out.split() == ['Python_3']


def test_query_prints_table(docsets_dir, capsys):
    assert cli.main(['--docsets-dir', docsets_dir, 'query', 'puts']) == 0
    out = capsys.readouterr().out
    assert 'puts' in out
    assert 'Ruby' in out
    assert 'Method' in out


def test_query_without_hits(docsets_dir, capsys):
    assert cli.main(['--docsets-dir', docsets_dir, 'query', 'zzz', 'python']) == 1
    assert 'No results' in capsys.readouterr().err


def test_query_with_broken_index_exits_2(docsets_dir, capsys):
    resources = os.path.join(docsets_dir, 'Broken.docset', 'Contents', 'Resources')
    os.makedirs(resources)
    with open(os.path.join(resources, 'docSet.dsidx'), 'wb') as f:
        f.write(b'not sqlite' * 100)
    assert cli.main(['--docsets-dir', docsets_dir, 'query', 'open']) == 2
    assert 'docset-search:' in capsys.readouterr().err
