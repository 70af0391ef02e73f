from pathlib import Path

import pytest

from wpscaffold.replacer import ReplaceError, expand_globs, keep_suffix, replace_in_files, rule, token


def _write(root: Path, name: str, text: str) -> Path:
    p = root / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Plugin Name: Plugin Name", "Plugin Name: Foo"),
        (" * Plugin Name: Plugin Name\n * Version: 1.0", " * Plugin Name: Foo\n * Version: 1.0"),
        ("<h1>Plugin Name</h1>", "<h1>Foo</h1>"),
        ("Plugin Name:", "Plugin Name:"),
    ],
)
def test_keep_suffix_leaves_header_label(text: str, expected: str) -> None:
    assert keep_suffix("Plugin Name", "Foo").apply(text) == expected


def test_keep_suffix_inserts_backslashes_verbatim() -> None:
    assert keep_suffix("Theme Name", "Acme\\Theme").apply("Theme Name here") == "Acme\\Theme here"


def test_token_is_literal() -> None:
    r = token("Required\\PluginName", "Required\\MyPlugin")
    assert r.apply("namespace Required\\PluginName;") == "namespace Required\\MyPlugin;"
    assert token("a.b", "x").apply("a.b axb") == "x axb"


def test_token_count_limits_replacements() -> None:
    assert token("#X=", "X=1", count=1).apply("#X=\n#X=") == "X=1\n#X="


def test_rules_apply_in_order(tmp_path: Path) -> None:
    f = _write(tmp_path, "plugin.php", "namespace Required\\PluginName;\n// plugin-name\n")

    replace_in_files(
        tmp_path,
        ["plugin.php"],
        [token("Required\\PluginName", "Acme\\Widgets"), token("PluginName", "WRONG"), token("plugin-name", "widgets")],
    )

    assert f.read_text(encoding="utf-8") == "namespace Acme\\Widgets;\n// widgets\n"


def test_later_rule_sees_earlier_output(tmp_path: Path) -> None:
    f = _write(tmp_path, "a.txt", "one")
    replace_in_files(tmp_path, ["a.txt"], [token("one", "two"), token("two", "three")])
    assert f.read_text(encoding="utf-8") == "three"


def test_dry_run_reports_without_writing(tmp_path: Path) -> None:
    a = _write(tmp_path, "a.php", "plugin-name")
    _write(tmp_path, "b.php", "nothing here")

    changes = replace_in_files(tmp_path, ["*.php"], [token("plugin-name", "acme")], dry=True)

    assert [(c.file.name, c.changed) for c in changes] == [("a.php", True), ("b.php", False)]
    assert a.read_text(encoding="utf-8") == "plugin-name"


def test_second_application_changes_nothing(tmp_path: Path) -> None:
    _write(tmp_path, "a.php", "Plugin Name: Plugin Name\nplugin-name")
    rules = [keep_suffix("Plugin Name", "Acme"), token("plugin-name", "acme")]

    first = replace_in_files(tmp_path, ["a.php"], rules)
    second = replace_in_files(tmp_path, ["a.php"], rules)

    assert [c.changed for c in first] == [True]
    assert [c.changed for c in second] == [False]


def test_unchanged_files_are_not_rewritten(tmp_path: Path) -> None:
    f = _write(tmp_path, "a.txt", "same")
    before = f.stat().st_mtime_ns
    replace_in_files(tmp_path, ["a.txt"], [token("other", "x")])
    assert f.stat().st_mtime_ns == before


def test_recursive_globs_visit_each_file_once(tmp_path: Path) -> None:
    _write(tmp_path, "inc/a.php", "")
    _write(tmp_path, "inc/sub/b.php", "")
    _write(tmp_path, "top.php", "")

    files = expand_globs(tmp_path, ["inc/**/*.php", "**/*.php"])

    assert [p.relative_to(tmp_path).as_posix() for p in files] == ["inc/a.php", "inc/sub/b.php", "top.php"]


def test_missing_files_are_skipped_unless_required(tmp_path: Path) -> None:
    assert replace_in_files(tmp_path, ["nope.json"], [token("a", "b")]) == []
    with pytest.raises(ReplaceError):
        replace_in_files(tmp_path, ["nope.json"], [token("a", "b")], allow_empty=False)


def test_binary_files_are_left_alone(tmp_path: Path) -> None:
    p = tmp_path / "logo.php"
    p.write_bytes(b"\xff\xfeplugin-name")
    changes = replace_in_files(tmp_path, ["*.php"], [token("plugin-name", "x")])
    assert [c.changed for c in changes] == [False]
    assert p.read_bytes() == b"\xff\xfeplugin-name"


def test_line_endings_preserved(tmp_path: Path) -> None:
    p = tmp_path / "a.txt"
    p.write_bytes(b"plugin-name\r\nnext\r\n")
    replace_in_files(tmp_path, ["a.txt"], [token("plugin-name", "acme")])
    assert p.read_bytes() == b"acme\r\nnext\r\n"


def test_regex_rule_with_group_reference() -> None:
    r = rule(r"v(\d+)", r"version \1", literal=False)
    assert r.apply("v2 and v10") == "version 2 and version 10"
