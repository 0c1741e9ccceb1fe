"""Tests for dossier_session.py: the upload/generate/results state machine."""

import pytest

from dossier_session import (
    AWAITING_FILE,
    AWAITING_RESPONSE,
    IDLE,
    SENDING_TEXT,
    SHOWING_ERROR,
    SHOWING_RESULTS,
    DossierSession,
    InvalidTransition,
)


@pytest.fixture
def session():
    return DossierSession("abc")


@pytest.fixture
def loaded(session):
    session.file_selected("name\nJane\n")
    return session


class TestTransitions:
    def test_initial_state(self, session):
        assert session.state == AWAITING_FILE
        assert not session.is_processing

    def test_file_selected(self, loaded):
        assert loaded.state == IDLE
        assert loaded.csv_data == "name\nJane\n"

    def test_submit(self, loaded):
        loaded.submit()
        assert loaded.state == AWAITING_RESPONSE
        assert loaded.is_processing
        assert loaded.processing_text == SENDING_TEXT

    def test_response_ok(self, loaded):
        loaded.submit()
        loaded.response_ok("raw", "<b>html</b>")
        assert loaded.state == SHOWING_RESULTS
        assert loaded.has_results()
        assert loaded.results_content == "<b>html</b>"
        assert loaded.processing_text == "Processing..."

    def test_response_error_then_retry(self, loaded):
        loaded.submit()
        loaded.response_error("Error 500: boom", "boom")
        assert loaded.state == SHOWING_ERROR
        assert loaded.error == "Error 500: boom"
        loaded.submit()
        assert loaded.state == AWAITING_RESPONSE
        assert loaded.error == ""

    def test_new_file_after_results(self, loaded):
        loaded.submit()
        loaded.response_ok("raw", "html")
        loaded.file_selected("other")
        assert loaded.state == IDLE
        assert loaded.response_text == ""
        assert loaded.results_content == ""

    @pytest.mark.parametrize("steps", [[], ["submit"], ["submit", "ok"], ["submit", "error"]])
    def test_reset_from_any_state(self, loaded, steps):
        for step in steps:
            if step == "submit":
                loaded.submit()
            elif step == "ok":
                loaded.response_ok("raw", "html")
            else:
                loaded.response_error("err")
        loaded.reset()
        assert loaded.state == AWAITING_FILE
        assert loaded.csv_data == ""
        assert loaded.error == ""


class TestInvalidTransitions:
    def test_submit_without_file(self, session):
        with pytest.raises(InvalidTransition):
            session.submit()

    def test_double_submit(self, loaded):
        loaded.submit()
        with pytest.raises(InvalidTransition):
            loaded.submit()

    def test_upload_while_processing(self, loaded):
        loaded.submit()
        with pytest.raises(InvalidTransition):
            loaded.file_selected("other")
        assert loaded.csv_data == "name\nJane\n"

    def test_response_without_request(self, loaded):
        with pytest.raises(InvalidTransition) as exc_info:
            loaded.response_ok("raw", "html")
        assert exc_info.value.state == IDLE
        assert exc_info.value.event == "response_ok"


class TestSubmissions:
    def test_submit_numbers_increase(self, loaded):
        first = loaded.submit()
        loaded.response_error("err", submission=first)
        assert loaded.submit() == first + 1

    def test_result_after_reset_is_dropped(self, loaded):
        first = loaded.submit()
        loaded.reset()
        loaded.file_selected("second")
        second = loaded.submit()

        assert loaded.response_ok("stale", "stale html", submission=first) is False
        assert loaded.state == AWAITING_RESPONSE

        assert loaded.response_ok("fresh", "fresh html", submission=second) is True
        assert loaded.results_content == "fresh html"

    def test_error_after_reset_is_dropped(self, loaded):
        first = loaded.submit()
        loaded.reset()
        assert loaded.response_error("late", submission=first) is False
        assert loaded.state == AWAITING_FILE
        assert loaded.error == ""

    def test_idle_seconds(self, session):
        assert session.idle_seconds(now=session.last_active + 5) == 5
        session.file_selected("x")
        assert session.idle_seconds(now=session.last_active) == 0


class TestSnapshot:
    def test_to_dict(self, loaded):
        snapshot = loaded.to_dict()
        assert snapshot == {
            'session_id': 'abc',
            'state': IDLE,
            'is_processing': False,
            'processing_text': 'Processing...',
            'error': '',
            'has_csv': True,
            'results_content': '',
        }

    def test_has_results_requires_body(self, loaded):
        loaded.submit()
        loaded.response_ok("", "")
        assert not loaded.has_results()
