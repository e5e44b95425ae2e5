from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from docblocks.domain.blocks.errors import DuplicateIdAcrossFilesError, DuplicateIdInFileError
from docblocks.domain.blocks.registry import BlockRegistry
from docblocks.domain.blocks.value_objects import Origin, SourceBlock


def _block(block_id: str, path: str, line: int = 1, content: str = "body") -> SourceBlock:
    return SourceBlock(id=block_id, content=content, origin=Origin(path=Path(path), start_line=line, end_line=line + 2))


def test_merge_builds_lookup() -> None:
    registry = BlockRegistry.merge([_block("b", "src/b.py"), _block("a", "src/a.py", content="alpha")])

    assert len(registry) == 2
    assert list(registry) == ["a", "b"]
    assert registry.get("a").content == "alpha"
    assert registry.get("missing") is None
    assert "b" in registry
    assert [block.id for block in registry.blocks()] == ["a", "b"]


def test_empty_registry() -> None:
    registry = BlockRegistry.merge([])
    assert len(registry) == 0
    assert not registry


def test_registry_is_read_only() -> None:
    registry = BlockRegistry.merge([_block("a", "src/a.py")])
    with pytest.raises(TypeError):
        registry["b"] = _block("b", "src/b.py")  # type: ignore[index]


def test_origin_is_not_part_of_block_equality() -> None:
    assert _block("a", "one.py", 1) == _block("a", "two.py", 10)


def test_conflict_across_files_names_both_origins() -> None:
    first = _block("x", "pkg/a.py", 3)
    second = _block("x", "pkg/b.py", 7)

    with pytest.raises(DuplicateIdAcrossFilesError) as excinfo:
        BlockRegistry.merge([second, first])

    error = excinfo.value
    assert error.block_id == "x"
    assert error.first.path == Path("pkg/a.py")
    assert error.second.path == Path("pkg/b.py")
    assert "pkg/a.py:3" in error.message and "pkg/b.py:7" in error.message
    assert [origin["path"] for origin in error.as_dict()["origins"]] == ["pkg/a.py", "pkg/b.py"]


def test_conflict_is_reported_identically_for_every_order() -> None:
    blocks = [
        _block("x", "c.py", 1),
        _block("x", "a.py", 5),
        _block("y", "b.py", 1),
        _block("x", "b.py", 9),
    ]
    reported = set()
    for permutation in itertools.permutations(blocks):
        with pytest.raises(DuplicateIdAcrossFilesError) as excinfo:
            BlockRegistry.merge(permutation)
        reported.add((str(excinfo.value.first), str(excinfo.value.second)))

    assert reported == {("a.py:5", "b.py:9")}


def test_same_file_duplicate_is_an_in_file_error() -> None:
    with pytest.raises(DuplicateIdInFileError) as excinfo:
        BlockRegistry.merge([_block("x", "a.py", 10), _block("x", "a.py", 2)])

    assert excinfo.value.first_line == 2
    assert excinfo.value.line == 10
