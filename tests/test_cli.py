import json

from typer.testing import CliRunner

from cmdstream.cli.main import app

runner = CliRunner()


def test_describe():
    result = runner.invoke(app, ["describe", "data.json?fmt=jstream"])
    assert result.exit_code == 0
    out = json.loads(result.stdout.strip().splitlines()[-1])
    assert out["format"] == "jstream"
    assert out["framing"] == "stream"
    assert out["path"] == "data.json"


def test_describe_unsupported():
    result = runner.invoke(app, ["describe", "http://example.com/data.json"])
    assert result.exit_code == 1


def test_cat_converts_stream_to_array(tmp_path):
    src = tmp_path / "in.jstream"
    dst = tmp_path / "out.json"
    src.write_text('{"id": 1}\n{"id": 2}\n')
    result = runner.invoke(app, ["cat", str(src), str(dst)])
    assert result.exit_code == 0
    assert json.loads(dst.read_text()) == [{"id": 1}, {"id": 2}]


def test_run_with_config_uri(tmp_path, monkeypatch):
    src = tmp_path / "cmds.json"
    src.write_text(json.dumps([{"id": "a"}, {"id": "b"}]))
    monkeypatch.setenv("CMDSTREAM_URI", str(src))
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 0


def test_run_missing_file(tmp_path):
    result = runner.invoke(app, ["run", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_missing_config_exits_1(tmp_path):
    result = runner.invoke(app, ["run", "cmds.json", "-c", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert not isinstance(result.exception, FileNotFoundError)


def test_malformed_config_exits_1(tmp_path):
    cfg = tmp_path / "bad.json"
    cfg.write_text("{not json")
    result = runner.invoke(app, ["describe", "cmds.json", "-c", str(cfg)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, json.JSONDecodeError)
