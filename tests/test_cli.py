"""Tests for the interactive CLI command dispatch."""

import pytest

from pixilator.api.cli import (
    MSG_EMPTY_PROMPT,
    MSG_GENERATION_FAILED,
    MSG_RATE_LIMITED,
    CliSession,
    dispatch,
)
from pixilator.memory.history import GenerationHistory
from pixilator.safety.rate_limiter import RateLimiter
from pixilator.storage.library import GenerationLibrary

from conftest import FakeSynthesizer, FakeTable


@pytest.fixture
def session(make_orchestrator, tmp_path):
    return CliSession(
        orchestrator=make_orchestrator(),
        history=GenerationHistory(path=str(tmp_path / "pixilator_history.json")),
        library=GenerationLibrary(FakeTable()),
    )


def test_exit_ends_session(session):
    assert dispatch(session, "exit") is False
    assert dispatch(session, "QUIT") is False


def test_prompt_generates_and_records_history(session, capsys):
    assert dispatch(session, "a lighthouse in a storm") is True

    out = capsys.readouterr().out
    assert "Refined prompt:" in out
    (item,) = session.history.items()
    assert item.original_prompt == "a lighthouse in a storm"
    assert item.style == "realistic"


def test_selection_commands_apply_to_generation(session, synthesizer):
    dispatch(session, "/style vaporwave")
    dispatch(session, "/ratio 9:16")
    dispatch(session, "/model black-forest-labs/FLUX.1-dev")
    dispatch(session, "neon city")

    _, _, ratio, model = synthesizer.calls[0]
    assert (ratio, model) == ("9:16", "black-forest-labs/FLUX.1-dev")
    assert session.history.items()[0].style == "vaporwave"


def test_unknown_style_is_rejected(session, capsys):
    dispatch(session, "/style watercolor")
    assert session.style == "realistic"
    assert "Unknown style" in capsys.readouterr().out


def test_empty_prompt_message(session, capsys):
    dispatch(session, "   ")
    assert MSG_EMPTY_PROMPT in capsys.readouterr().out


def test_rate_limit_message(make_orchestrator, tmp_path, capsys):
    session = CliSession(
        orchestrator=make_orchestrator(rate_limiter=RateLimiter(max_requests=1)),
        history=GenerationHistory(path=str(tmp_path / "h.json")),
        library=GenerationLibrary(None),
    )
    dispatch(session, "first")
    dispatch(session, "second")
    assert MSG_RATE_LIMITED in capsys.readouterr().out
    assert len(session.history) == 1


def test_generation_failure_message(make_orchestrator, tmp_path, capsys):
    session = CliSession(
        orchestrator=make_orchestrator(synthesizer=FakeSynthesizer(fail=True)),
        history=GenerationHistory(path=str(tmp_path / "h.json")),
        library=GenerationLibrary(None),
    )
    dispatch(session, "a cat")
    assert MSG_GENERATION_FAILED in capsys.readouterr().out
    assert len(session.history) == 0


def test_history_and_clear(session, capsys):
    dispatch(session, "/history")
    assert "No generations yet" in capsys.readouterr().out

    dispatch(session, "a cat")
    dispatch(session, "/history")
    assert "1 recent generation:" in capsys.readouterr().out

    dispatch(session, "/clear history")
    assert session.history.items() == []


def test_library_unavailable_message(make_orchestrator, tmp_path, capsys):
    session = CliSession(
        orchestrator=make_orchestrator(),
        history=GenerationHistory(path=str(tmp_path / "h.json")),
        library=GenerationLibrary(None),
    )
    dispatch(session, "/library")
    assert "Library unavailable" in capsys.readouterr().out


def test_styles_lists_catalog(session, capsys):
    dispatch(session, "/styles")
    out = capsys.readouterr().out
    assert "realistic" in out and "16:9" in out and "FLUX.1-dev" in out
