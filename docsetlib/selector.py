"""Docset selection: which installed docsets the current filter matches."""

from typing import Iterable, List, NamedTuple


class DocsetEntry(NamedTuple):
    name: str
    matched: bool


class DocsetMenu:
    """Name-sorted docset entries with match bookkeeping.

    `total_count == 0` means no docsets are installed at all, which is not
    the same as docsets being installed while none match the filter.
    """

    def __init__(self, entries: List[DocsetEntry]):
        self.entries = entries
        self.matched_count = sum(1 for e in entries if e.matched)
        self.ignored_count = len(entries) - self.matched_count

    @property
    def total_count(self) -> int:
        return self.matched_count + self.ignored_count

    @property
    def highlight_ignored(self) -> bool:
        # with nothing matched every entry would be "ignored"; show them plainly
        return self.matched_count > 0

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)


def build_menu(all_installed: Iterable[str], selection_filtered: Iterable[str]) -> DocsetMenu:
    selected = set(selection_filtered)
    names = sorted(set(all_installed) | selected)
    return DocsetMenu([DocsetEntry(name, name in selected) for name in names])


def select_docsets(library, docsets_filter: str) -> DocsetMenu:
    """Compare all installed docsets with those matching `docsets_filter`.

    `library` is anything with a `list_docsets(filter)` method; an empty
    filter lists every installed docset.
    """
    all_installed = library.list_docsets('')
    selection_filtered = library.list_docsets(docsets_filter)
    return build_menu(all_installed, selection_filtered)
