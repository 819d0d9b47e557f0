import json
import logging
import sys

import pytest

import main


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """Run the CLI from a scratch directory and restore root logging afterwards"""
    monkeypatch.chdir(tmp_path)
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["sum-proof", *argv])
    with pytest.raises(SystemExit) as excinfo:
        main.main()
    return excinfo.value.code


def test_success_prints_proof(monkeypatch, capsys):
    assert run_cli(monkeypatch, "--sha", "abc", "--input", "def", "--seed", "7") == 0
    response = json.loads(capsys.readouterr().out)
    assert response["proof"].startswith("Proof { a: G1Affine")


def test_seed_makes_output_reproducible(monkeypatch, capsys):
    run_cli(monkeypatch, "--sha", "abc", "--input", "def", "--seed", "7")
    first = capsys.readouterr().out
    run_cli(monkeypatch, "--sha", "abc", "--input", "def", "--seed", "7")
    assert capsys.readouterr().out == first


def test_missing_input_exits_nonzero(monkeypatch, capsys):
    assert run_cli(monkeypatch, "--sha", "abc") == 1
    assert capsys.readouterr().out == ""


def test_event_file(tmp_path, monkeypatch, capsys):
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps({"event": {"sha": "abc", "input_data": "def"}}))

    assert run_cli(monkeypatch, "--event", str(event_path), "--seed", "3") == 0
    assert "proof" in json.loads(capsys.readouterr().out)


def test_malformed_event_file_exits_nonzero(tmp_path, monkeypatch):
    event_path = tmp_path / "event.json"
    event_path.write_text("{bad")
    assert run_cli(monkeypatch, "--event", str(event_path)) == 1


def test_absent_event_file_exits_nonzero(tmp_path, monkeypatch):
    assert run_cli(monkeypatch, "--event", str(tmp_path / "absent.json")) == 1


def test_output_writes_results_and_report(tmp_path, monkeypatch, capsys):
    output = tmp_path / "out" / "proof.json"
    assert run_cli(monkeypatch, "--sha", "abc", "--input", "def",
                   "--seed", "5", "--output", str(output)) == 0
    assert capsys.readouterr().out == ""

    saved = json.loads(output.read_text())
    assert saved["data"]["proof"].startswith("Proof { a: G1Affine")
    assert saved["data"]["artifact"]["proof"]["protocol"] == "groth16"

    report = (tmp_path / "out" / "proof_performance.txt").read_text()
    assert "SUM PROOF SERVICE - PERFORMANCE REPORT" in report
