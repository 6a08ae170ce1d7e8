from testtraverse.utils.file_discovery import discover_files

JS = [".js", ".mjs", ".cjs", ".jsx"]


def touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")


def test_discovery(tmp_path):
    for rel in ["a.js", "lib/b.mjs", "lib/c.ts", "node_modules/pkg/index.js",
                ".git/hooks/x.js", "dist/bundle.js", "fixtures/skip.js"]:
        touch(tmp_path / rel)
    (tmp_path / ".gitignore").write_text("dist/\n*skip*\n", encoding="utf-8")

    found = discover_files([str(tmp_path)], JS)
    assert found == sorted([str(tmp_path / "a.js"), str(tmp_path / "lib" / "b.mjs")])


def test_suffix_filter(tmp_path):
    touch(tmp_path / "a.js")
    touch(tmp_path / "b.jsx")
    assert discover_files([str(tmp_path)], [".jsx"]) == [str(tmp_path / "b.jsx")]


def test_file_root_taken_as_is(tmp_path):
    path = tmp_path / "notes.txt"
    touch(path)
    assert discover_files([str(path)], JS) == [str(path)]


def test_duplicate_roots(tmp_path):
    touch(tmp_path / "a.js")
    assert discover_files([str(tmp_path), str(tmp_path / "a.js")], JS) == [str(tmp_path / "a.js")]
