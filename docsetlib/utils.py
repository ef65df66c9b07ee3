"""Small utility helpers used by docsetlib.

This module provides the package logger, HTML escaping and the docsets
directory lookup. It has no global side-effects beyond setting up a module
logger.
"""

import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger("docsetlib")
if not logger.handlers:
    # configure only if not configured by the application
    h = logging.StreamHandler()
    fmt = logging.Formatter('%(levelname)s: %(message)s')
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(logging.WARNING)


# Order matters: '&' first so entities produced later are not re-escaped.
_HTML_ENTITIES = (
    ('&', '&amp;'),
    ('"', '&quot;'),
    ("'", '&#39;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
)


def html_escape(text: str) -> str:
    """Escape the five XML predefined entities in `text`."""
    for char, entity in _HTML_ENTITIES:
        text = text.replace(char, entity)
    return text


def set_verbosity(verbose: int) -> None:
    if verbose >= 2:
        logger.setLevel(logging.DEBUG)
    elif verbose == 1:
        logger.setLevel(logging.INFO)
    else:
        logger.setLevel(logging.WARNING)


def default_docsets_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the docsets root from the environment.

    DOCSETS_DIR wins; otherwise the directory lives under XDG_DATA_HOME
    (default ~/.local/share).
    """
    env = os.environ if environ is None else environ
    if env.get('DOCSETS_DIR'):
        return env['DOCSETS_DIR']
    data_home = env.get('XDG_DATA_HOME') or os.path.join(os.path.expanduser('~'), '.local', 'share')
    return os.path.join(data_home, 'docsets')
