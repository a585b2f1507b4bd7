from pathlib import Path

import pytest

from vebitor_docs.errors import DocumentIOError, FolderNotFound, PathOutsideRoot
from vebitor_docs.models import SearchRequest
from vebitor_docs.paths import PathResolver
from vebitor_docs.search import SearchEngine, split_lines


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body.encode("utf-8"))


@pytest.fixture
def root(tmp_path: Path) -> Path:
    root = tmp_path / "userdata"
    _write(root / "a.txt", "alpha\nneedle here\nomega\n")
    _write(root / "notes" / "b.txt", "Needle and needle\n")
    _write(root / "notes" / "deep" / "c.txt", "nothing to see")
    _write(root / "zeta.txt", "needle")
    _write(tmp_path / "outside.txt", "needle outside")
    return root


@pytest.fixture
def engine(root: Path) -> SearchEngine:
    return SearchEngine(PathResolver(root))


def test_split_lines():
    assert split_lines("") == []
    assert split_lines("one\n") == ["one"]
    assert split_lines("one\r\ntwo\n\nthree") == ["one", "two", "", "three"]


def test_search_whole_tree_in_walk_order(engine):
    results = engine.search(SearchRequest(query="needle"))
    assert [r.file_path for r in results] == ["a.txt", "notes/b.txt", "zeta.txt"]

    first = results[0].matches
    assert len(first) == 1
    assert first[0].line_number == 2
    assert first[0].line_text == "needle here"
    assert (first[0].start, first[0].end) == (0, 6)

    second = results[1].matches
    assert [(m.start, m.end) for m in second] == [(0, 6), (11, 17)]


def test_search_case_sensitive(engine):
    results = engine.search(SearchRequest(query="Needle", case_sensitive=True))
    assert [r.file_path for r in results] == ["notes/b.txt"]
    assert len(results[0].matches) == 1


def test_search_regex(engine):
    results = engine.search(SearchRequest(query=r"^(alpha|omega)$", mode="regex"))
    assert [r.file_path for r in results] == ["a.txt"]
    assert [m.line_number for m in results[0].matches] == [1, 3]


def test_search_invalid_regex_returns_no_results(engine):
    assert engine.search(SearchRequest(query="(needle", mode="regex")) == []


def test_search_unknown_mode_returns_no_results(engine):
    assert engine.search(SearchRequest(query="needle", mode="fuzzy")) == []


def test_search_restricted_to_folder(engine):
    results = engine.search(SearchRequest(query="needle", folder="notes"))
    assert [r.file_path for r in results] == ["notes/b.txt"]


def test_search_folder_outside_root(engine):
    with pytest.raises(PathOutsideRoot):
        engine.search(SearchRequest(query="needle", folder="../"))


def test_search_missing_folder(engine):
    with pytest.raises(FolderNotFound):
        engine.search(SearchRequest(query="needle", folder="missing"))


def test_search_single_file_folder(engine):
    results = engine.search(SearchRequest(query="needle", folder="zeta.txt"))
    assert [r.file_path for r in results] == ["zeta.txt"]


def test_search_no_matches_is_empty_list(engine):
    assert engine.search(SearchRequest(query="absent")) == []


def test_search_undecodable_file_aborts(engine, root):
    (root / "notes" / "broken.txt").write_bytes(b"needle \xff\xfe")
    with pytest.raises(DocumentIOError):
        engine.search(SearchRequest(query="needle"))


def test_search_result_wire_shape(engine):
    results = engine.search(SearchRequest(query="needle", folder="/notes"))
    assert results[0].to_dict() == {
        "filePath": "notes/b.txt",
        "matches": [
            {"lineNumber": 1, "lineText": "Needle and needle", "startPos": 0, "endPos": 6},
            {"lineNumber": 1, "lineText": "Needle and needle", "startPos": 11, "endPos": 17},
        ],
    }


def test_search_symlinked_folder_outside_root(engine, root):
    (root / "link").symlink_to(root.parent, target_is_directory=True)
    with pytest.raises(PathOutsideRoot):
        engine.search(SearchRequest(query="needle", folder="link"))
    # The walk from the root does not follow the link either.
    results = engine.search(SearchRequest(query="needle"))
    assert "link/outside.txt" not in [r.file_path for r in results]
