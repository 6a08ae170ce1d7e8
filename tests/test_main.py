import json
import os

from testtraverse.errors import ParseLimitationsError
from testtraverse.main import FileFailure, create_index, format_failure, main
from testtraverse.utils.line_mapping import FileLineCache

GOOD = 'describe("g", () => { it("t", () => { foo(); }); });\n'
BROKEN = 'const a = 1;\nit("t", () => {\n'
LIMITED = "export const a = () => {}, b = 1;\n"


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_index_to_output_file(tmp_path):
    source = write(tmp_path / "a.js", GOOD)
    output = tmp_path / "index.json"
    assert main(["index", str(tmp_path), "--output", str(output), "--no-progress"]) == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert list(data) == [source]
    assert data[source]["tests"][0]["calls"][0]["name"] == "foo"


def test_index_to_stdout(tmp_path, capsys):
    source = write(tmp_path / "a.js", GOOD)
    assert main(["index", source]) == 0
    data = json.loads(capsys.readouterr().out)
    assert source in data


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "index" in capsys.readouterr().out


def test_syntax_error_aborts_with_location(tmp_path, capsys):
    write(tmp_path / "a.js", GOOD)
    broken = write(tmp_path / "b.js", BROKEN)
    output = tmp_path / "index.json"
    assert main(["index", str(tmp_path), "-o", str(output)]) == 1
    err = capsys.readouterr().err
    assert "Syntax Error" in err
    assert f"at ({os.path.abspath(broken)}:" in err
    assert not output.exists()


def test_keep_going_skips_failing_files(tmp_path, capsys):
    good = write(tmp_path / "a.js", GOOD)
    limited = write(tmp_path / "c.js", LIMITED)
    output = tmp_path / "index.json"
    assert main(["index", str(tmp_path), "-o", str(output), "--keep-going"]) == 1
    data = json.loads(output.read_text(encoding="utf-8"))
    assert list(data) == [good]
    err = capsys.readouterr().err
    assert "multi-variable declaration" in err
    assert f"{os.path.abspath(limited)}:1:" in err


def test_create_index_stops_at_first_failure(tmp_path):
    paths = [
        write(tmp_path / "a.js", GOOD),
        write(tmp_path / "b.js", LIMITED),
        write(tmp_path / "c.js", GOOD),
    ]
    results, failures = create_index(paths)
    assert list(results) == [paths[0]]
    assert [f.file_path for f in failures] == [paths[1]]
    assert isinstance(failures[0].error, ParseLimitationsError)


def test_create_index_with_workers_keeps_order(tmp_path):
    paths = [write(tmp_path / f"{name}.js", GOOD) for name in "abcdef"]
    results, failures = create_index(paths, workers=3, keep_going=True)
    assert failures == []
    assert list(results) == paths


def test_format_parse_limitation(tmp_path):
    path = write(tmp_path / "c.js", LIMITED)
    failure = FileFailure(path, ParseLimitationsError("message", LIMITED.index("b = ")))
    text = format_failure(failure, FileLineCache())
    col = LIMITED.index("b = ") + 1
    assert text == f"message\n\nat ({os.path.abspath(path)}:1:{col})"
