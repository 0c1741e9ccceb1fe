# Conference Dossier Generator - Session State
"""
Per-visitor state for the upload -> generate -> results flow.

States:
    awaiting_file       nothing uploaded yet
    idle                CSV loaded, waiting for Generate
    awaiting_response   webhook call in flight
    showing_results     formatted briefs available for display and download
    showing_error       last attempt failed, user may retry or upload again
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)

AWAITING_FILE = "awaiting_file"
IDLE = "idle"
AWAITING_RESPONSE = "awaiting_response"
SHOWING_RESULTS = "showing_results"
SHOWING_ERROR = "showing_error"

FILE_SELECTED = "file_selected"
SUBMIT = "submit"
RESPONSE_OK = "response_ok"
RESPONSE_ERROR = "response_error"
RESET = "reset"

ALL_STATES = (AWAITING_FILE, IDLE, AWAITING_RESPONSE, SHOWING_RESULTS, SHOWING_ERROR)

# (state, event) -> next state
TRANSITIONS = {
    (AWAITING_FILE, FILE_SELECTED): IDLE,
    (IDLE, FILE_SELECTED): IDLE,
    (SHOWING_RESULTS, FILE_SELECTED): IDLE,
    (SHOWING_ERROR, FILE_SELECTED): IDLE,
    (IDLE, SUBMIT): AWAITING_RESPONSE,
    (SHOWING_ERROR, SUBMIT): AWAITING_RESPONSE,
    (AWAITING_RESPONSE, RESPONSE_OK): SHOWING_RESULTS,
    (AWAITING_RESPONSE, RESPONSE_ERROR): SHOWING_ERROR,
}
TRANSITIONS.update({(state, RESET): AWAITING_FILE for state in ALL_STATES})

DEFAULT_PROCESSING_TEXT = "Processing..."
SENDING_TEXT = "Sending to n8n webhook..."


class InvalidTransition(Exception):
    def __init__(self, state, event):
        self.state = state
        self.event = event
        super().__init__(f"Cannot handle '{event}' while {state}")


class DossierSession:
    """Holds one visitor's CSV, webhook response and results."""

    def __init__(self, session_id):
        self.session_id = session_id
        self.state = AWAITING_FILE
        self.csv_data = ""
        self.response_text = ""
        self.error = ""
        self.results_content = ""
        self.processing_text = DEFAULT_PROCESSING_TEXT
        # Bumped by submit and reset; a worker's result only lands if it still matches
        self.submission = 0
        self.last_active = time.monotonic()
        self._lock = threading.Lock()

    def _fire(self, event):
        next_state = TRANSITIONS.get((self.state, event))
        if next_state is None:
            raise InvalidTransition(self.state, event)
        logger.debug("Session %s: %s --%s--> %s", self.session_id, self.state, event, next_state)
        self.state = next_state
        self.last_active = time.monotonic()

    def _is_stale(self, submission, event):
        if submission is None or submission == self.submission:
            return False
        logger.debug("Session %s: dropping %s from submission %d (current %d)",
                     self.session_id, event, submission, self.submission)
        return True

    def file_selected(self, csv_data):
        with self._lock:
            self._fire(FILE_SELECTED)
            self.csv_data = csv_data
            self.response_text = ""
            self.error = ""
            self.results_content = ""

    def submit(self):
        """Start a webhook request. Returns the submission number to report back with."""
        with self._lock:
            if not self.csv_data:
                raise InvalidTransition(self.state, SUBMIT)
            self._fire(SUBMIT)
            self.submission += 1
            self.error = ""
            self.processing_text = SENDING_TEXT
            return self.submission

    def response_ok(self, response_text, results_content, submission=None):
        """Record a successful response. Returns False if it belonged to an older submission."""
        with self._lock:
            if self._is_stale(submission, RESPONSE_OK):
                return False
            self._fire(RESPONSE_OK)
            self.response_text = response_text
            self.results_content = results_content
            self.processing_text = DEFAULT_PROCESSING_TEXT
            return True

    def response_error(self, message, response_text="", submission=None):
        with self._lock:
            if self._is_stale(submission, RESPONSE_ERROR):
                return False
            self._fire(RESPONSE_ERROR)
            self.error = message
            self.response_text = response_text
            self.processing_text = DEFAULT_PROCESSING_TEXT
            return True

    def reset(self):
        with self._lock:
            self._fire(RESET)
            self.submission += 1
            self.csv_data = ""
            self.response_text = ""
            self.error = ""
            self.results_content = ""
            self.processing_text = DEFAULT_PROCESSING_TEXT

    @property
    def is_processing(self):
        return self.state == AWAITING_RESPONSE

    def idle_seconds(self, now=None):
        """Seconds since the last state change."""
        if now is None:
            now = time.monotonic()
        return now - self.last_active

    def has_results(self):
        return self.state == SHOWING_RESULTS and bool(self.response_text)

    def to_dict(self):
        with self._lock:
            return {
                'session_id': self.session_id,
                'state': self.state,
                'is_processing': self.state == AWAITING_RESPONSE,
                'processing_text': self.processing_text,
                'error': self.error,
                'has_csv': bool(self.csv_data),
                'results_content': self.results_content,
            }
