import json

import pytest

from brandmerge.errors import CsvReadError, OptionsError
from brandmerge.main import main
from brandmerge.models import MergeOptions
from brandmerge.pipeline import merge_tables, run_merge
from brandmerge.reader import parse_csv_text
from brandmerge.writer import dry_run_path, serialize_brands, sort_brands


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.fixture
def inputs(tmp_path):
    return {
        "brands": _write(tmp_path / "brands.csv", "brand,slug\nAcme,acme\n"),
        "sources": _write(tmp_path / "sources.csv", "slug,url\nacme,https://acme.com\n"),
        "verifications": _write(
            tmp_path / "verifications.csv",
            "slug,verification_status,last_verified\nacme,Verified,1/2/2024\n",
        ),
        "out": str(tmp_path / "site" / "data" / "brands.json"),
    }


def _argv(inputs, *extra, skip=()):
    argv = []
    for name, value in inputs.items():
        if name not in skip:
            argv += [f"--{name}", value]
    return argv + list(extra)


def test_end_to_end(inputs, capsys):
    assert main(_argv(inputs)) == 0

    with open(inputs["out"], encoding="utf-8") as fh:
        text = fh.read()
    assert text.endswith("\n")
    assert json.loads(text) == [{
        "brand": "Acme",
        "slug": "acme",
        "sources": ["https://acme.com"],
        "verification_status": "Verified",
        "last_verified": "2024-01-02",
    }]
    assert list(json.loads(text)[0]) == ["brand", "slug", "sources", "verification_status", "last_verified"]
    assert text.startswith('[\n  {\n    "brand": "Acme",')

    out = capsys.readouterr().out
    assert "Brands kept: 1" in out
    assert "Verifications processed: 1" in out
    assert "testing_qa_notes present for 0/1 brands" in out


def test_verifications_are_optional(inputs, capsys):
    assert main(_argv(inputs, skip=("verifications",))) == 0
    with open(inputs["out"], encoding="utf-8") as fh:
        assert json.load(fh) == [{"brand": "Acme", "slug": "acme", "sources": ["https://acme.com"]}]
    assert "Verifications processed" not in capsys.readouterr().out


def test_dry_run_writes_temp_file(inputs, tmp_path, capsys):
    assert main(_argv(inputs, "--dry-run")) == 0

    out = tmp_path / "site" / "data" / "brands.json"
    assert not out.exists()
    assert (tmp_path / "site" / "data" / ".temp-brands.json").exists()
    assert "temporary file" in capsys.readouterr().out


def test_strict_mode_fails_on_warnings(inputs, tmp_path, capsys):
    inputs["brands"] = _write(tmp_path / "brands.csv", "brand,slug,color\nAcme,acme,red\n")

    assert main(_argv(inputs)) == 0
    assert "Unknown columns in brands CSV" in capsys.readouterr().err

    assert main(_argv(inputs, "--strict")) == 1


def test_row_errors_fail_the_run_but_keep_going(inputs, tmp_path, capsys):
    inputs["brands"] = _write(tmp_path / "brands.csv", "brand,slug\nAcme,acme\nNameless,\n")

    assert main(_argv(inputs)) == 1
    with open(inputs["out"], encoding="utf-8") as fh:
        assert [b["slug"] for b in json.load(fh)] == ["acme"]
    captured = capsys.readouterr()
    assert "Error: Row 3 missing required field(s): slug" in captured.err
    assert "Brands skipped: 1" in captured.out


def test_missing_required_flag(inputs, capsys):
    assert main(_argv(inputs, skip=("sources",))) == 1
    assert "--sources is required" in capsys.readouterr().err


def test_unreadable_input_writes_nothing(inputs, tmp_path, capsys):
    inputs["sources"] = str(tmp_path / "missing.csv")

    assert main(_argv(inputs)) == 1
    assert "Error reading sources CSV" in capsys.readouterr().err
    assert not (tmp_path / "site").exists()


def test_self_test_ignores_other_flags(capsys):
    assert main(["--self-test", "--brands", "/does/not/exist.csv"]) == 0
    assert "All self-tests passed" in capsys.readouterr().out


def test_brand_key_override(inputs, tmp_path):
    inputs["sources"] = _write(
        tmp_path / "sources.csv", "slug,Brand Name,url\nzzz,Acme,https://acme.com/x\n"
    )
    assert main(_argv(inputs, "--brand-key", "Brand Name")) == 0
    with open(inputs["out"], encoding="utf-8") as fh:
        assert json.load(fh)[0]["sources"] == ["https://acme.com/x"]


def test_run_merge_raises_before_writing(tmp_path):
    with pytest.raises(OptionsError):
        run_merge(MergeOptions(brands=tmp_path / "b.csv"))
    with pytest.raises(CsvReadError):
        run_merge(MergeOptions(
            brands=tmp_path / "b.csv", sources=tmp_path / "s.csv", out=tmp_path / "out.json"
        ))
    assert not (tmp_path / "out.json").exists()


def test_merge_tables_counts_and_sorting():
    brands = parse_csv_text(
        "brand,slug,testing_qa_notes\n"
        "beta,beta,\n"
        "Émile,emile,Lab tested\n"
        "Alpha,alpha,\n"
        "Alpha Dup,ALPHA,\n",
        "brands",
    )
    sources = parse_csv_text(
        "slug,url\nbeta,https://beta.com\nghost,https://ghost.com\nalpha,bad url\n", "sources"
    )
    merged, report = merge_tables(brands, sources)

    assert [b["brand"] for b in merged] == ["Alpha", "beta", "Émile"]
    assert report.stages == ["read", "brands", "sources"]
    assert report.stats.brands_processed == 4
    assert report.stats.duplicate_slugs == 1
    assert report.stats.sources_processed == 3
    assert report.stats.sources_orphaned == 1
    assert [w.issue for w in report.warnings] == ["duplicate_slug", "invalid_url"]
    assert report.brands_with_testing_notes == 1
    assert report.exit_code == 0
    report.strict = True
    assert report.exit_code == 1


def test_sort_and_serialize():
    brands = [{"brand": "b"}, {"brand": "A"}, {"brand": "a"}, {"brand": "Ä"}]
    assert [b["brand"] for b in sort_brands(brands)] == ["a", "A", "Ä", "b"]
    assert serialize_brands([{"brand": "Café"}]) == '[\n  {\n    "brand": "Café"\n  }\n]\n'


def test_dry_run_path(tmp_path):
    assert dry_run_path(tmp_path / "data" / "brands.json") == tmp_path / "data" / ".temp-brands.json"


def test_unwritable_output_is_a_clean_failure(inputs, tmp_path, capsys):
    inputs["out"] = str(tmp_path)

    assert main(_argv(inputs)) == 1
    captured = capsys.readouterr()
    assert "Error: Could not write output to" in captured.err
    assert "Summary:" not in captured.out


def test_output_parent_is_a_file(inputs, tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    inputs["out"] = str(blocker / "brands.json")

    assert main(_argv(inputs)) == 1
    assert "Error: Could not write output to" in capsys.readouterr().err
