import json

import pytest

import catch_autoplay


@pytest.fixture
def empty_config(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{}", encoding="utf-8")
    return config_path


def run_cli(capsys, argv):
    exit_code = catch_autoplay.main(argv)
    return exit_code, json.loads(capsys.readouterr().out)


def test_demo_run(capsys, empty_config):
    exit_code, payload = run_cli(capsys, ["--demo", "--difficulty", "hard", "--config", str(empty_config)])
    assert exit_code == 0
    assert payload["ok"] is True
    assert payload["title"] == "demo (hard)"
    assert payload["keyframes"][0] == {"time": -100000.0, "position": 0.5, "hyperdash": False}
    assert payload["total_score"] > 0


def test_chart_file_with_output(capsys, tmp_path, empty_config):
    chart_path = tmp_path / "chart.json"
    chart_path.write_text(
        json.dumps({"title": "single", "objects": [{"type": "fruit", "x": 0.6, "time": 1000}]}),
        encoding="utf-8",
    )
    output_path = tmp_path / "out.json"
    exit_code, payload = run_cli(
        capsys,
        [
            str(chart_path),
            "--config",
            str(empty_config),
            "--dash-speed",
            "0.0001",
            "--half-width",
            "0.1",
            "--output",
            str(output_path),
        ],
    )
    assert exit_code == 0
    assert payload["title"] == "single"
    assert [(k["time"], k["position"]) for k in payload["keyframes"]] == [(-100000.0, 0.5), (1000.0, 0.6)]
    saved = json.loads(output_path.read_text(encoding="utf-8"))
    assert saved["total_score"] == 100


def test_missing_input(capsys, empty_config):
    exit_code, payload = run_cli(capsys, ["--config", str(empty_config)])
    assert exit_code == 2
    assert payload["ok"] is False


def test_bad_chart(capsys, tmp_path, empty_config):
    chart_path = tmp_path / "bad.json"
    chart_path.write_text("not json", encoding="utf-8")
    exit_code, payload = run_cli(capsys, [str(chart_path), "--config", str(empty_config)])
    assert exit_code == 2
    assert "not valid JSON" in payload["error"]


def test_bad_override(capsys, empty_config):
    exit_code, payload = run_cli(capsys, ["--demo", "--config", str(empty_config), "--dash-speed", "0"])
    assert exit_code == 2
    assert payload["ok"] is False


def test_run_tests_flag(capsys):
    assert catch_autoplay.main(["--run-tests"]) == 0
    assert "Chunk tests passed." in capsys.readouterr().out


def test_non_utf8_chart(capsys, tmp_path, empty_config):
    chart_path = tmp_path / "latin.json"
    chart_path.write_bytes(b'{"objects": [\xff\xfe]}')
    exit_code, payload = run_cli(capsys, [str(chart_path), "--config", str(empty_config)])
    assert exit_code == 2
    assert "not valid UTF-8" in payload["error"]


def test_huge_integer_chart(capsys, tmp_path, empty_config):
    chart_path = tmp_path / "huge.json"
    chart_path.write_text('{"objects": [{"type": "fruit", "x": 1' + "0" * 400 + ', "time": 0}]}', encoding="utf-8")
    exit_code, payload = run_cli(capsys, [str(chart_path), "--config", str(empty_config)])
    assert exit_code == 2
    assert payload["ok"] is False
