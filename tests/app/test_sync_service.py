from __future__ import annotations

from pathlib import Path

import pytest

from docblocks.app.sync import BlockSyncService
from docblocks.domain.blocks.errors import DuplicateIdAcrossFilesError
from docblocks.domain.blocks.events import RegionStatus
from docblocks.utils.config import CollectorFilters, SyncConfig

SOURCE = """/// Function to add two numbers
// START <id:adding_numbers>
fn add_numbers(a: i32, b: i32) -> i32 {
    a + b
}
// END
"""

README = """# Example

<!-- adding_numbers -->
placeholder
<!-- adding_numbers -->
"""

EXPECTED_README = """# Example

<!-- adding_numbers -->
fn add_numbers(a: i32, b: i32) -> i32 {
    a + b
}
<!-- adding_numbers -->
"""


@pytest.fixture()
def project(tmp_path: Path, write_tree) -> Path:
    write_tree(tmp_path / "src", {"lib.rs": SOURCE})
    write_tree(tmp_path / "docs", {"README.md": README})
    return tmp_path


def test_collect_builds_registry(project: Path) -> None:
    result = BlockSyncService(jobs=2).collect(project / "src")

    assert result.ok
    assert result.files_scanned == 1
    block = result.registry["adding_numbers"]
    assert block.content == "fn add_numbers(a: i32, b: i32) -> i32 {\n    a + b\n}"
    assert block.origin.start_line == 2


def test_replace_rewrites_documentation(project: Path) -> None:
    service = BlockSyncService(jobs=2)

    report = service.replace(project / "src", project / "docs")

    assert not report.failed
    assert report.summary()["replaced"] == 1
    assert report.summary()["written"] == 1
    assert (project / "docs" / "README.md").read_text(encoding="utf-8") == EXPECTED_README


def test_replace_is_idempotent_and_check_agrees(project: Path) -> None:
    service = BlockSyncService()
    service.replace(project / "src", project / "docs")
    snapshot = (project / "docs" / "README.md").read_bytes()

    second = service.replace(project / "src", project / "docs")
    check = service.replace(project / "src", project / "docs", check=True)

    assert (project / "docs" / "README.md").read_bytes() == snapshot
    assert [outcome.status for outcome in second.outcomes] == [RegionStatus.UNCHANGED]
    assert not check.failed
    assert check.errors == []


def test_check_reports_drift_without_writing(project: Path) -> None:
    report = BlockSyncService().replace(project / "src", project / "docs", check=True)

    assert report.failed
    assert [outcome.status for outcome in report.outcomes] == [RegionStatus.WOULD_CHANGE]
    assert [error.code for error in report.errors] == ["DRIFT_DETECTED"]
    assert (project / "docs" / "README.md").read_text(encoding="utf-8") == README
    assert report.as_dict()["mode"] == "check"
    assert report.as_dict()["status"] == "error"


def test_unknown_id_fails_but_other_documents_are_written(project: Path, write_tree) -> None:
    write_tree(project / "docs", {"other.md": "<!-- nope -->\nstale\n<!-- nope -->\n"})

    report = BlockSyncService().replace(project / "src", project / "docs")

    assert report.failed
    assert report.summary()["unknown_id"] == 1
    (error,) = report.errors
    assert error.code == "UNKNOWN_ID"
    assert (error.path.name, error.line) == ("other.md", 1)
    assert (project / "docs" / "README.md").read_text(encoding="utf-8") == EXPECTED_README
    assert (project / "docs" / "other.md").read_text(encoding="utf-8") == "<!-- nope -->\nstale\n<!-- nope -->\n"


def test_doc_root_defaults_can_share_the_source_tree(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"lib.rs": SOURCE, "README.md": README})

    report = BlockSyncService().replace(tmp_path, tmp_path)

    assert not report.failed
    assert [document.path.name for document in report.documents] == ["README.md"]
    assert (tmp_path / "README.md").read_text(encoding="utf-8") == EXPECTED_README


def test_duplicate_id_across_files_aborts(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            "a.py": "# START <id:x>\none\n# END\n",
            "b.py": "# START <id:x>\ntwo\n# END\n",
        },
    )

    with pytest.raises(DuplicateIdAcrossFilesError) as excinfo:
        BlockSyncService(jobs=4).collect(tmp_path)

    assert excinfo.value.first.path.name == "a.py"
    assert excinfo.value.second.path.name == "b.py"


def test_source_errors_are_collected_per_file(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            "good.py": "# START <id:ok>\nfine\n# END\n",
            "bad.py": "# START <id:broken>\nno end\n",
            "worse.py": "# START <id:a>\n# START <id:b>\n# END\n",
        },
    )

    result = BlockSyncService(jobs=3).collect(tmp_path)

    assert not result.ok
    assert sorted(error.code for error in result.errors) == ["BLOCK_NESTED", "BLOCK_UNTERMINATED"]
    assert list(result.registry) == ["ok"]


def test_source_errors_abort_replace_before_touching_documents(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path / "src", {"lib.rs": SOURCE, "bad.rs": "// START <id:open>\n"})
    write_tree(tmp_path / "docs", {"README.md": README})

    report = BlockSyncService().replace(tmp_path / "src", tmp_path / "docs")

    assert report.failed
    assert report.documents == ()
    assert [error.code for error in report.errors] == ["BLOCK_UNTERMINATED"]
    assert (tmp_path / "docs" / "README.md").read_text(encoding="utf-8") == README


def test_collector_filters_apply_to_both_trees(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            "lib.rs": SOURCE,
            "vendor/copy.rs": SOURCE,
            "README.md": README,
            "vendor/README.md": README,
        },
    )
    config = SyncConfig(filters=CollectorFilters(excludes=("vendor/*",)))

    report = BlockSyncService(config).replace(tmp_path, tmp_path)

    assert not report.failed
    assert (tmp_path / "README.md").read_text(encoding="utf-8") == EXPECTED_README
    assert (tmp_path / "vendor" / "README.md").read_text(encoding="utf-8") == README


def test_ignored_build_copies_do_not_conflict(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            ".gitignore": "build/\n",
            "pkg/a.py": "# START <id:x>\none\n# END\n",
            "build/lib/pkg/a.py": "# START <id:x>\none\n# END\n",
        },
    )

    result = BlockSyncService().collect(tmp_path)

    assert result.ok
    assert result.registry["x"].origin.path == tmp_path / "pkg" / "a.py"


def test_unresolved_document_counts_no_replacement(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path / "src", {"a.py": "# START <id:a>\nfresh\n# END\n"})
    document = "<!-- a -->\nstale\n<!-- a -->\n\n<!-- missing -->\n<!-- missing -->\n"
    write_tree(tmp_path / "docs", {"README.md": document})

    report = BlockSyncService().replace(tmp_path / "src", tmp_path / "docs")

    summary = report.summary()
    assert report.failed
    assert (summary["replaced"], summary["skipped"], summary["written"]) == (0, 1, 0)
    assert (tmp_path / "docs" / "README.md").read_text(encoding="utf-8") == document


def test_byte_order_mark_in_source_is_not_block_content(tmp_path: Path) -> None:
    (tmp_path / "lib.py").write_bytes("\ufeff# START <id:a>\nvalue\n# END\n".encode("utf-8"))

    result = BlockSyncService().collect(tmp_path)

    assert result.registry["a"].content == "value"
    assert result.registry["a"].origin.start_line == 1
