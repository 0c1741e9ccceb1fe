# Conference Dossier Generator - Webhook Client
"""
Posts the attendee CSV to the dossier workflow webhook.

One request, one response. No timeout and no retries: a failure is reported
back to the user, who can simply click Generate again.
"""

import logging
from collections import namedtuple

import requests

logger = logging.getLogger(__name__)

CSV_FIELD_NAME = "file"
CSV_FILENAME = "conference_data.csv"
NETWORK_HINT = "(This may be due to internal network access restrictions)"

WebhookResult = namedtuple("WebhookResult", ["status_code", "text"])


class WebhookError(Exception):
    """Base class for webhook failures."""


class WebhookConnectionError(WebhookError):
    """The webhook could not be reached at all."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Error connecting to webhook: {reason} {NETWORK_HINT}")


class WebhookResponseError(WebhookError):
    """The webhook answered with a non-success status."""

    def __init__(self, status_code, body):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Error {status_code}: {body}")


def post_csv(csv_text, url):
    """
    Send the CSV to the webhook as a multipart upload.

    Args:
        csv_text: Full CSV content as text
        url: Webhook endpoint

    Returns:
        WebhookResult: Status code and the response body as text

    Raises:
        WebhookConnectionError: Transport failure (DNS, refused, reset...)
        WebhookResponseError: Non-2xx status, body kept verbatim
    """
    files = {CSV_FIELD_NAME: (CSV_FILENAME, csv_text.encode("utf-8"), "text/csv")}
    logger.info("Posting %d bytes of CSV to %s", len(csv_text), url)

    try:
        response = requests.post(url, files=files)
    except requests.RequestException as e:
        logger.error("Webhook request failed: %s", e)
        raise WebhookConnectionError(str(e) or e.__class__.__name__) from e

    logger.info("Webhook answered %s", response.status_code)
    if not 200 <= response.status_code < 300:
        logger.warning("Webhook returned error status %s", response.status_code)
        raise WebhookResponseError(response.status_code, response.text)

    return WebhookResult(response.status_code, response.text)
