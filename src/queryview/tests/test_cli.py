import json

import pytest
from click.testing import CliRunner

import queryview
from queryview.cli import cli

QUERIES = [
    {
        "queryId": "running_old",
        "state": "RUNNING",
        "query": "SELECT 1",
        "session": {"user": "alice"},
        "queryStats": {"createTime": "2024-01-01T00:00:00Z", "totalCpuTime": "5s"},
    },
    {
        "queryId": "running_new",
        "state": "RUNNING",
        "query": "SELECT 2",
        "session": {"user": "bob"},
        "queryStats": {"createTime": "2024-01-01T00:01:00Z", "totalCpuTime": "1s"},
    },
    {
        "queryId": "finished",
        "state": "FINISHED",
        "query": "SELECT 3",
        "session": {"user": "alice"},
        "queryStats": {"createTime": "2024-01-01T00:02:00Z"},
    },
]


@pytest.fixture
def queries_file(tmp_path):
    path = tmp_path / "queries.json"
    path.write_text(json.dumps(QUERIES))
    return str(path)


def run(*args):
    result = CliRunner(env={"NO_COLOR": "1"}).invoke(cli, list(args))
    return result, [line.split()[1] for line in result.output.splitlines()[:-1]]


def test_version():
    result = CliRunner().invoke(cli, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == queryview.__version__


def test_list(queries_file):
    result, ids = run("list", "--file", queries_file)
    assert result.exit_code == 0, result.output
    assert ids == ["running_new", "running_old"]
    assert result.output.splitlines()[-1] == "2 of 3 queries"


def test_list_filters(queries_file):
    _, ids = run("list", "--file", queries_file, "--state", "finished")
    assert ids == ["finished"]

    _, ids = run(
        "list", "--file", queries_file, "--state", "RUNNING", "--search", "Bob"
    )
    assert ids == ["running_new"]


def test_list_sort(queries_file):
    _, ids = run("list", "--file", queries_file, "--sort", "cpu")
    assert ids == ["running_old", "running_new"]

    _, ids = run("list", "--file", queries_file, "--ascending")
    assert ids == ["running_old", "running_new"]

    result, ids = run("list", "--file", queries_file, "--max", "1")
    assert ids == ["running_new"]
    assert result.output.splitlines()[-1] == "1 of 3 queries"


def test_list_rejects_negative_max(queries_file):
    result = CliRunner().invoke(cli, ["list", "--file", queries_file, "--max", "-1"])
    assert result.exit_code == 2
    assert "--max" in result.output


def test_list_transport_failure(tmp_path):
    path = tmp_path / "queries.json"
    path.write_text("not json")
    result = CliRunner().invoke(cli, ["list", "--file", str(path)])
    assert result.exit_code == 1
    assert "Could not fetch queries" in result.output


def test_missing_settings(tmp_path, queries_file):
    result = CliRunner().invoke(
        cli, ["--config", str(tmp_path / "nope.yaml"), "list", "--file", queries_file]
    )
    assert result.exit_code == 1
