import io
import json

import httpx
import pytest

from wordstats import main as cli
from wordstats.services.fetcher import HttpFetcher


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_prints_ranked_words(tmp_path):
    one = _write(tmp_path, "one.txt", "cat dog cat")
    two = _write(tmp_path, "two.txt", "dog dog bird")
    out = io.StringIO()

    code = cli.main(["--source", f"One={one}", "--source", f"Two={two.as_uri()}", "--top", "2"], out=out)

    assert code == 0
    lines = out.getvalue().splitlines()
    assert lines[0] == "Most frequent words:"
    assert lines[1:3] == ["1. dog: 3", "2. cat: 2"]
    assert lines[4].startswith("Fetch time:")
    assert lines[5].startswith("Processing time:")


def test_cli_json_output(tmp_path):
    one = _write(tmp_path, "one.txt", "Apple banana apple")
    out = io.StringIO()

    code = cli.main(["--source", f"One={one}", "--json"], out=out)

    assert code == 0
    payload = json.loads(out.getvalue())
    assert payload["entries"] == [{"word": "apple", "count": 2}, {"word": "banana", "count": 1}]
    assert payload["total_words"] == 3
    assert payload["sources"] == [{"name": "One", "url": str(one)}]
    assert set(payload["timings"]) == {"fetch_seconds", "process_seconds", "ranking_seconds"}


def test_cli_sources_file(tmp_path):
    book = _write(tmp_path, "book.txt", "word word")
    sources = _write(tmp_path, "sources.json", json.dumps([{"name": "Book", "url": str(book)}]))
    out = io.StringIO()

    assert cli.main(["--sources-file", str(sources)], out=out) == 0
    assert "1. word: 2" in out.getvalue()


def test_cli_returns_error_code_on_fetch_failure(tmp_path):
    good = _write(tmp_path, "good.txt", "fine")
    out = io.StringIO()

    code = cli.main(["--source", f"Good={good}", "--source", f"Missing={tmp_path / 'missing.txt'}"], out=out)

    assert code == 1
    assert out.getvalue() == ""


@pytest.mark.parametrize("argv", [["--source", "no-equals-sign"], ["--top", "-3"], ["--workers", "0"]])
def test_cli_rejects_bad_arguments(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv, out=io.StringIO())
    assert excinfo.value.code == 2


def test_cli_rejects_unreadable_sources_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--sources-file", str(tmp_path / "absent.json")], out=io.StringIO())
    assert excinfo.value.code == 2


def _flaky_http(monkeypatch, body):
    """Route the CLI's HttpFetcher through a transport that answers 503 once, then 200."""
    responses = iter([httpx.Response(503), httpx.Response(200, text=body)])
    transport = httpx.MockTransport(lambda request: next(responses))

    def factory(**kwargs):
        return HttpFetcher(transport=transport, base_backoff=0, max_backoff=0, **kwargs)

    monkeypatch.setattr(cli, "HttpFetcher", factory)


@pytest.mark.parametrize("extra", [[], ["--log-level", "WARNING"]])
def test_cli_json_keeps_process_stdout_parseable_after_retry(monkeypatch, capsys, extra):
    _flaky_http(monkeypatch, "Alpha beta alpha")

    code = cli.main(["--source", "A=https://example.org/a.txt", "--json", *extra])

    captured = capsys.readouterr()
    assert code == 0
    payload = json.loads(captured.out)
    assert payload["entries"][0] == {"word": "alpha", "count": 2}
    assert "completed_at" in payload
    if extra:
        assert "HTTP 503" in captured.err
        assert "HTTP 503" not in captured.out


def test_cli_text_mode_logs_to_stdout(monkeypatch, capsys):
    _flaky_http(monkeypatch, "Alpha beta alpha")

    code = cli.main(["--source", "A=https://example.org/a.txt", "--log-level", "WARNING"])

    captured = capsys.readouterr()
    assert code == 0
    assert "HTTP 503" in captured.out
    assert "1. alpha: 2" in captured.out
