import argparse
import sys

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .docsets import DocsetError, DocsetLibrary
from .server import DEFAULT_HOST, DEFAULT_PORT, respond_stdio, serve
from .utils import default_docsets_dir, set_verbosity


def print_hits(hits, console=None):
    console = console or Console()
    table = Table(box=box.SIMPLE)
    table.add_column('name', no_wrap=True)
    table.add_column('type', no_wrap=True)
    table.add_column('docset', no_wrap=True)
    table.add_column('url', overflow='fold')
    for hit in hits:
        table.add_row(escape(hit.name), escape(hit.type), escape(hit.docset), escape(hit.url))
    console.print(table)


def build_parser():
    parser = argparse.ArgumentParser(prog='docset-search', description="Search local docsets from a browser or the terminal")
    parser.add_argument("--docsets-dir", default=None,
                        help="Directory holding NAME.docset bundles (default: $DOCSETS_DIR or $XDG_DATA_HOME/docsets)")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of hits per docset")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Serve the search page, one process per connection")
    p_serve.add_argument("--host", default=DEFAULT_HOST)
    p_serve.add_argument("--port", type=int, default=DEFAULT_PORT)

    sub.add_parser("respond", help="Answer a single HTTP request from stdin on stdout")

    p_docsets = sub.add_parser("docsets", help="List installed docsets")
    p_docsets.add_argument("patterns", nargs="*")

    p_query = sub.add_parser("query", help="Search docsets and print the hits")
    p_query.add_argument("pattern")
    p_query.add_argument("docsets", nargs="*")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose)
    library = DocsetLibrary(args.docsets_dir or default_docsets_dir(), limit=args.limit)

    try:
        if args.command == "serve":
            serve(library, host=args.host, port=args.port)
        elif args.command == "respond":
            respond_stdio(library)
        elif args.command == "docsets":
            for name in library.list_docsets(" ".join(args.patterns)):
                print(name)
        elif args.command == "query":
            hits = library.search(args.pattern, " ".join(args.docsets))
            if not hits:
                print(f"No results for {args.pattern!r}", file=sys.stderr)
                return 1
            print_hits(hits)
    except DocsetError as e:
        print(f"docset-search: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
