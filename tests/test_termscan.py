import json
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

import termscan
from glossmatch.automaton import AhoCorasick

TERMS = [
    {"id": "heart-failure", "names": ["Heart failure"], "abbr": ["CHF"]},
    {"id": "heart", "names": ["Heart"], "level": "premed"},
    {"id": "ecg", "names": ["Electrocardiogram"], "abbr": ["ECG"], "experimental": True},
]


@pytest.fixture
def inputs(tmp_path):
    terms_file = tmp_path / "terms.json"
    terms_file.write_text(json.dumps(TERMS), encoding="utf-8")
    text_file = tmp_path / "note.txt"
    text_file.write_text("CHF confirmed; heart failure on ECG.", encoding="utf-8")
    return terms_file, text_file, tmp_path / "out.jsonl"


def _read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_emits_term_matches(inputs):
    terms_file, text_file, out = inputs
    assert termscan.main([str(terms_file), str(text_file), "-q", "-o", str(out)]) == 0
    assert _read_lines(out) == [
        {"start": 0, "end": 3, "term_ids": ["heart-failure"], "match": "CHF"},
        {"start": 15, "end": 28, "term_ids": ["heart-failure"], "match": "heart failure"},
    ]


def test_level_and_experimental_flags(inputs):
    terms_file, text_file, out = inputs
    args = [str(terms_file), str(text_file), "-q", "-o", str(out)]
    termscan.main(args + ["--level", "premed", "--enable-experimental"])
    assert [m["term_ids"] for m in _read_lines(out)] == [["heart"]]

    termscan.main(args + ["--enable-experimental"])
    assert [m["match"] for m in _read_lines(out)] == ["CHF", "heart failure", "ECG"]


def test_no_resolve_emits_raw_hits(inputs):
    terms_file, text_file, out = inputs
    termscan.main([str(terms_file), str(text_file), "--no-resolve", "-o", str(out)])
    patterns = [m["pattern"] for m in _read_lines(out)]
    assert patterns == ["chf", "heart", "heart failure", "ecg"]


def test_pretty_print_and_stats(inputs, capsys):
    terms_file, text_file, out = inputs
    termscan.main(
        [str(terms_file), str(text_file), "--pretty-print", "--show-stats", "-o", str(out)]
    )
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data) == 2
    err = capsys.readouterr().err
    assert "Match Statistics" in err
    assert "Raw hits: 4" in err
    assert "Final matches: 2" in err


def test_stats_do_not_rescan_text(inputs, monkeypatch):
    terms_file, text_file, out = inputs
    searches = []
    original = AhoCorasick.search

    def counting_search(self, text):
        searches.append(text)
        return original(self, text)

    monkeypatch.setattr(AhoCorasick, "search", counting_search)
    termscan.main([str(terms_file), str(text_file), "-q", "--show-stats", "-o", str(out)])
    assert len(searches) == 1


def test_raw_count_reads_filtering_total():
    progress = {
        "stages": [
            {"stage": "searching", "current": 0, "total": 10, "timestamp": 0.0},
            {"stage": "filtering", "current": 0, "total": 7, "timestamp": 0.1},
            {"stage": "filtering", "current": 3, "total": 7, "timestamp": 0.2},
        ]
    }
    assert termscan.raw_count(progress) == 7
    assert termscan.raw_count({"stages": []}) == 0


def test_missing_bundle_returns_error(tmp_path):
    text_file = tmp_path / "note.txt"
    text_file.write_text("text", encoding="utf-8")
    assert termscan.main([str(tmp_path / "missing.json"), str(text_file)]) == 1


def test_missing_arguments():
    with pytest.raises(SystemExit):
        termscan.main([])


def test_version(capsys):
    assert termscan.main(["--version"]) == 0
    assert "glossmatch" in capsys.readouterr().out
