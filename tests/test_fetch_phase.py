import pytest

from wordstats.core.errors import FetchError, PipelineError
from wordstats.services.pipeline.fetch_phase import fetch_all


@pytest.mark.asyncio
async def test_fetch_all_preserves_source_order(make_fetcher, three_sources):
    fetcher = make_fetcher(
        {"mem://a": "A", "mem://b": "B", "mem://c": "C"},
        delays={"mem://a": 0.03, "mem://b": 0.02, "mem://c": 0.0},
    )

    documents = await fetch_all(fetcher, three_sources, run_id="test")

    assert [doc.source.name for doc in documents] == ["a", "b", "c"]
    assert [doc.text for doc in documents] == ["A", "B", "C"]
    # all fetches were started before any finished
    assert fetcher.completed == ["mem://c", "mem://b", "mem://a"]


@pytest.mark.asyncio
async def test_fetch_all_empty_sources(make_fetcher):
    fetcher = make_fetcher({})
    assert await fetch_all(fetcher, [], run_id="test") == []
    assert fetcher.requested == []


@pytest.mark.asyncio
async def test_join_then_fail_waits_for_every_fetch(make_fetcher, three_sources):
    fetcher = make_fetcher(
        {"mem://a": "A", "mem://b": FetchError("mem://b", "boom"), "mem://c": "C"},
        delays={"mem://c": 0.05},
    )

    with pytest.raises(PipelineError) as excinfo:
        await fetch_all(fetcher, three_sources, run_id="test", fail_fast=False)

    assert excinfo.value.phase == "fetch"
    assert [name for name, _ in excinfo.value.failures] == ["b"]
    assert isinstance(excinfo.value.failures[0][1], FetchError)
    assert sorted(fetcher.completed) == ["mem://a", "mem://c"]


@pytest.mark.asyncio
async def test_join_then_fail_reports_all_failures(make_fetcher, three_sources):
    fetcher = make_fetcher(
        {
            "mem://a": FetchError("mem://a", "first"),
            "mem://b": "B",
            "mem://c": FetchError("mem://c", "second"),
        }
    )

    with pytest.raises(PipelineError) as excinfo:
        await fetch_all(fetcher, three_sources, run_id="test")

    assert [name for name, _ in excinfo.value.failures] == ["a", "c"]
    assert len(excinfo.value.reasons) == 2


@pytest.mark.asyncio
async def test_fail_fast_cancels_in_flight_siblings(make_fetcher, three_sources):
    fetcher = make_fetcher(
        {"mem://a": "A", "mem://b": FetchError("mem://b", "boom"), "mem://c": "C"},
        delays={"mem://c": 5.0},
    )

    with pytest.raises(PipelineError) as excinfo:
        await fetch_all(fetcher, three_sources, run_id="test", fail_fast=True)

    assert [name for name, _ in excinfo.value.failures] == ["b"]
    assert "mem://c" in fetcher.requested
    assert "mem://c" not in fetcher.completed


@pytest.mark.asyncio
async def test_unexpected_fetcher_exceptions_count_as_failures(make_fetcher, three_sources):
    fetcher = make_fetcher({"mem://a": "A", "mem://b": ValueError("bad"), "mem://c": "C"})

    with pytest.raises(PipelineError) as excinfo:
        await fetch_all(fetcher, three_sources, run_id="test")

    assert isinstance(excinfo.value.failures[0][1], ValueError)
