"""Tests for the run_sweep command line entry point."""

import json
import os
import shutil
import tempfile

import pytest

import run_sweep


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory, cleaned up after test."""
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


def test_cli_writes_artifacts(tmp_dir, capsys):
    kb_path = os.path.join(tmp_dir, "kb.json")
    code = run_sweep.main([
        "--sizes", "8", "16",
        "--cycles", "20",
        "--fixed",
        "--knowledge-base", kb_path,
        "--output-dir", tmp_dir,
    ])
    assert code == 0

    with open(os.path.join(tmp_dir, run_sweep.RESULTS_FILENAME)) as f:
        results = json.load(f)
    with open(os.path.join(tmp_dir, run_sweep.REPORT_FILENAME)) as f:
        report = json.load(f)

    assert [r["entity_count"] for r in results["results"]] == [8, 16]
    assert report["knowledge_base"]["total_analyses"] == 2
    assert os.path.exists(kb_path)

    out = capsys.readouterr().out
    assert "RESULTS" in out
    assert "TRAJECTORY LEARNING" in out
    assert "Ranges covered: micro" in out
    assert report["learning_metrics"]["max_entities_analyzed"] == 16


def test_cli_accumulates_knowledge(tmp_dir):
    kb_path = os.path.join(tmp_dir, "kb.json")
    args = ["--sizes", "8", "--cycles", "10", "--knowledge-base", kb_path, "--output-dir", tmp_dir]
    run_sweep.main(args)
    run_sweep.main(args)
    with open(kb_path) as f:
        assert json.load(f)["total_analyses"] == 2
