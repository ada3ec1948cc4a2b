import importlib.util
import json
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "evaluate_combination.py"

pytestmark = pytest.mark.filterwarnings("ignore:Only .* draws in the evaluation window")


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("_evaluate_combination", SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


@pytest.fixture
def draws_csv(tmp_path):
    path = tmp_path / "draws.csv"
    path.write_text(
        "date,num1,num2,num3,num4,num5,complementary\n"
        "2024-01-01,1,2,3,4,5,6\n"
        "2024-01-08,1,2,3,4,5,6\n"
        "2024-01-15,10,20,30,40,49,1\n"
        "2024-01-22,1,2,3,4,4,6\n"
    )
    return path


def test_single_combination_json(cli, draws_csv, capsys):
    code = cli.main([str(draws_csv), "--numbers", "1", "2", "3", "4", "5",
                     "--complementary", "6", "--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["totalTests"] == 3
    assert payload["wins"] == 2


def test_single_combination_report(cli, draws_csv, capsys):
    code = cli.main([str(draws_csv), "--numbers", "1", "2", "3", "4", "5",
                     "--complementary", "6", "--start-date", "2024-01-15"])
    assert code == 0
    out = capsys.readouterr().out
    assert "1 dropped" in out
    assert "Draws tested: 1" in out


def test_invalid_combination_exit_code(cli, draws_csv, capsys):
    code = cli.main([str(draws_csv), "--numbers", "1", "2", "3", "4", "4",
                     "--complementary", "6"])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_missing_arguments(cli, draws_csv):
    assert cli.main([str(draws_csv), "--numbers", "1", "2", "3", "4", "5"]) == 2


def test_batch_file(cli, draws_csv, tmp_path, capsys):
    combos = tmp_path / "combos.csv"
    combos.write_text(
        "num1,num2,num3,num4,num5,complementary\n"
        "1,2,3,4,5,6\n"
        "10,20,30,40,49,1\n"
    )
    out_csv = tmp_path / "results.csv"
    code = cli.main([str(draws_csv), "--batch", str(combos), "--output", str(out_csv), "--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [p["wins"] for p in payload] == [2, 1]
    assert out_csv.exists()


@pytest.mark.parametrize("content", [
    "num1,num2,num3,num4,num5\n1,2,3,4,5\n",
    "num1,num2,num3,num4,num5,complementary\n1,2,3,,5,6\n",
])
def test_bad_batch_file_exit_code(cli, draws_csv, tmp_path, capsys, content):
    combos = tmp_path / "combos.csv"
    combos.write_text(content)
    assert cli.main([str(draws_csv), "--batch", str(combos)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_report_shows_memory_estimate(cli, draws_csv, capsys):
    cli.main([str(draws_csv), "--numbers", "1", "2", "3", "4", "5", "--complementary", "6"])
    assert "(~600 B)" in capsys.readouterr().out
