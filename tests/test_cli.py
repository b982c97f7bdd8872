import json

import pytest

from omnisnip.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main
from omnisnip.snippet.storage import DATA_FILENAME


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("OMNISNIP_HOME", raising=False)
    monkeypatch.delenv("OMNISNIP_LOG_LEVEL", raising=False)


def _run(storage_dir, *args):
    return main(["--dir", str(storage_dir), *args])


def _stored(storage_dir):
    return json.loads((storage_dir / DATA_FILENAME).read_text(encoding="utf-8"))


def _add(storage_dir, title, *extra):
    return _run(
        storage_dir,
        "add",
        "--title",
        title,
        "--description",
        f"{title} description",
        "--code",
        f"print('{title}')",
        "--language",
        "python",
        "--category",
        "example",
        *extra,
    )


def test_add_then_list(storage_dir, capsys):
    assert _add(storage_dir, "Hello", "--tag", "greet", "--favorite") == EXIT_OK
    (document,) = _stored(storage_dir)
    assert document["tags"] == ["greet"]
    assert document["favorite"] is True

    capsys.readouterr()
    assert _run(storage_dir, "list") == EXIT_OK
    output = capsys.readouterr().out
    assert "List of Snippets (1)" in output
    assert "1. Hello *" in output
    assert document["id"] in output


def test_add_reads_code_from_file(storage_dir, tmp_path):
    source = tmp_path / "snippet.sh"
    source.write_text("echo hi\n", encoding="utf-8")

    exit_code = _run(
        storage_dir,
        "add",
        "--title",
        "Echo",
        "--file",
        str(source),
        "--language",
        "bash",
        "--category",
        "utility",
    )

    assert exit_code == EXIT_OK
    assert _stored(storage_dir)[0]["code"] == "echo hi\n"


def test_add_with_missing_code_file_is_usage_error(storage_dir, tmp_path, capsys):
    exit_code = _run(
        storage_dir,
        "add",
        "--title",
        "Ghost",
        "--file",
        str(tmp_path / "missing.py"),
        "--language",
        "python",
        "--category",
        "other",
    )

    assert exit_code == EXIT_USAGE
    assert "cannot read" in capsys.readouterr().err


def test_list_filters_and_sorts(storage_dir, capsys):
    _add(storage_dir, "Zebra", "--tag", "a")
    _add(storage_dir, "apple", "--tag", "b")
    _add(storage_dir, "Mango", "--tag", "c")
    capsys.readouterr()

    assert _run(storage_dir, "list", "--tag", "a", "--tag", "c", "--sort-by", "title", "--desc") == EXIT_OK
    output = capsys.readouterr().out
    assert "List of Snippets (2)" in output
    assert output.index("1. Zebra") < output.index("2. Mango")
    assert "apple" not in output


def test_view_update_delete_cycle(storage_dir, capsys):
    _add(storage_dir, "Original")
    snippet_id = _stored(storage_dir)[0]["id"]
    capsys.readouterr()

    assert _run(storage_dir, "update", snippet_id, "--title", "Renamed", "--no-favorite") == EXIT_OK
    assert _stored(storage_dir)[0]["title"] == "Renamed"
    assert _stored(storage_dir)[0]["description"] == "Original description"

    capsys.readouterr()
    assert _run(storage_dir, "view", snippet_id) == EXIT_OK
    output = capsys.readouterr().out
    assert "Renamed" in output
    assert "print('Original')" in output

    assert _run(storage_dir, "delete", snippet_id) == EXIT_OK
    assert _stored(storage_dir) == []


@pytest.mark.parametrize("command", ["view", "delete"])
def test_unknown_id_reports_not_found(storage_dir, capsys, command):
    assert _run(storage_dir, command, "missing") == EXIT_FAILURE
    assert "Snippet not found: missing" in capsys.readouterr().err


def test_update_unknown_id_reports_not_found(storage_dir, capsys):
    assert _run(storage_dir, "update", "missing", "--title", "x") == EXIT_FAILURE
    assert "Snippet not found" in capsys.readouterr().err


def test_search_prints_matches(storage_dir, capsys):
    _add(storage_dir, "Needle")
    _add(storage_dir, "Haystack")
    capsys.readouterr()

    assert _run(storage_dir, "search", "NEEDLE") == EXIT_OK
    output = capsys.readouterr().out
    assert "List of Snippets (1)" in output
    assert "Needle" in output


def test_search_with_no_results(storage_dir, capsys):
    assert _run(storage_dir, "search", "anything") == EXIT_OK
    assert "No results found." in capsys.readouterr().out


def test_clear_and_purge(storage_dir):
    _add(storage_dir, "One")
    _add(storage_dir, "Two")

    assert _run(storage_dir, "clear") == EXIT_OK
    assert _stored(storage_dir) == []

    assert _run(storage_dir, "purge") == EXIT_OK
    assert not storage_dir.exists()


def test_corrupt_storage_file_reports_read_error(storage_dir, capsys):
    storage_dir.mkdir(parents=True)
    (storage_dir / DATA_FILENAME).write_text("not json", encoding="utf-8")

    assert _run(storage_dir, "list") == EXIT_FAILURE
    assert "Cannot read snippets" in capsys.readouterr().err


def test_storage_dir_from_environment(storage_dir, monkeypatch):
    monkeypatch.setenv("OMNISNIP_HOME", str(storage_dir))

    assert main(["clear"]) == EXIT_OK
    assert _stored(storage_dir) == []


def test_invalid_language_is_rejected_by_parser(storage_dir):
    with pytest.raises(SystemExit) as excinfo:
        _run(storage_dir, "add", "--title", "x", "--code", "y", "--language", "cobol", "--category", "other")

    assert excinfo.value.code == 2
