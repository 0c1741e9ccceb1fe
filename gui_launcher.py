# Conference Dossier Generator - Main Flask Application
from flask import Flask, request, render_template_string, jsonify, send_file
import io
import logging
import os
import threading
import time
import uuid
from datetime import datetime, timezone
from werkzeug.utils import secure_filename

import app_config
from dossier_session import DossierSession, InvalidTransition
from html_formatter import build_html_document, format_blocks
from response_parser import parse_response_payload
from rtf_converter import build_rtf_download
from webhook_client import WebhookError, WebhookResponseError, post_csv

logger = logging.getLogger(__name__)

app = Flask(__name__)

CSV_MIME_TYPES = {"text/csv"}
DOWNLOAD_BASENAME = "Conference_Networking_Briefs"
SESSION_TTL = 3600  # seconds

# One entry per browser tab, keyed by session ID
sessions = {}


def get_session(session_id):
    """Look up a session, or None if the ID is unknown."""
    return sessions.get(session_id)


def is_csv_upload(file):
    """Accept a .csv filename or a text/csv content type."""
    ext = os.path.splitext(file.filename or "")[1].lower()
    return ext == ".csv" or file.mimetype in CSV_MIME_TYPES


def read_csv_text(file):
    """Decode an uploaded CSV as UTF-8, dropping a BOM and replacing bad bytes."""
    return file.read().decode("utf-8-sig", errors="replace")


def date_stamp():
    return datetime.now(timezone.utc).date().isoformat()


def run_in_background(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


def expire_sessions(now=None):
    """Drop sessions nobody has touched for SESSION_TTL seconds."""
    if now is None:
        now = time.monotonic()
    expired = [
        session_id for session_id, session in list(sessions.items())
        if not session.is_processing and session.idle_seconds(now) > SESSION_TTL
    ]
    for session_id in expired:
        sessions.pop(session_id, None)
    if expired:
        logger.info("Expired %d idle session(s)", len(expired))
    return expired


def generate_briefs(session, webhook_url, submission=None):
    """
    Send the session's CSV to the webhook and record the outcome.

    Runs on a background thread. Every failure ends up as an error state on
    the session; nothing is raised to the caller. A result for a submission
    the user has since reset or replaced is dropped.
    """
    csv_data = session.csv_data
    try:
        try:
            result = post_csv(csv_data, webhook_url)
        except WebhookResponseError as e:
            session.response_error(str(e), e.body, submission=submission)
            return
        except WebhookError as e:
            session.response_error(str(e), submission=submission)
            return

        blocks = parse_response_payload(result.text)
        content = format_blocks(blocks)
        if session.response_ok(result.text, content, submission=submission):
            logger.info("Session %s: formatted %d networking brief(s)", session.session_id, len(blocks))
    except InvalidTransition as e:
        logger.warning("Session %s: discarding webhook result: %s", session.session_id, e)


@app.route("/upload", methods=["POST"])
def upload_csv():
    """Store an uploaded CSV on a new or existing session."""
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({'error': 'No file uploaded'}), 400

    if not is_csv_upload(file):
        return jsonify({'error': f'{file.filename} is not a CSV file'}), 400

    expire_sessions()

    session_id = request.form.get("session_id")
    session = get_session(session_id)
    if session is None:
        session_id = str(uuid.uuid4())
        session = DossierSession(session_id)
        sessions[session_id] = session

    try:
        session.file_selected(read_csv_text(file))
    except InvalidTransition as e:
        return jsonify({'error': str(e)}), 409

    filename = secure_filename(file.filename)
    logger.info("Session %s: loaded %s", session_id, filename)
    return jsonify({'session_id': session_id, 'filename': filename})


@app.route("/generate/<session_id>", methods=["POST"])
def generate(session_id):
    """Kick off the webhook call and return immediately; poll /status for the result."""
    session = get_session(session_id)
    if session is None:
        return jsonify({'error': 'Invalid session ID'}), 404

    try:
        submission = session.submit()
    except InvalidTransition as e:
        return jsonify({'error': str(e)}), 409

    run_in_background(generate_briefs, session, app_config.get_webhook_url(), submission)
    return jsonify(session.to_dict())


@app.route("/status/<session_id>", methods=["GET"])
def get_status(session_id):
    """Get the current processing status."""
    session = get_session(session_id)
    if session is None:
        return jsonify({'error': 'Invalid session ID'}), 404
    return jsonify(session.to_dict())


@app.route("/reset/<session_id>", methods=["POST"])
def reset(session_id):
    """Start over: forget the CSV and any results, and drop the session."""
    session = sessions.pop(session_id, None)
    if session is None:
        return jsonify({'error': 'Invalid session ID'}), 404
    session.reset()
    return jsonify(session.to_dict())


@app.route("/download/<session_id>/<fmt>", methods=["GET"])
def download(session_id, fmt):
    """Download the briefs as RTF or as a standalone HTML page."""
    session = get_session(session_id)
    if session is None or not session.has_results():
        return jsonify({'error': 'No results to download'}), 404

    stamp = date_stamp()
    if fmt == "rtf":
        content = build_rtf_download(session.response_text)
        mimetype = 'application/rtf'
    elif fmt == "html":
        content = build_html_document(session.results_content, stamp)
        mimetype = 'text/html'
    else:
        return jsonify({'error': f'Unknown format: {fmt}'}), 404

    return send_file(
        io.BytesIO(content.encode('utf-8')),
        as_attachment=True,
        download_name=f"{DOWNLOAD_BASENAME}_{stamp}.{fmt}",
        mimetype=mimetype
    )


@app.route("/", methods=["GET"])
def index():
    html = """
    <!doctype html>
    <html lang="en">
    <head>
      <meta charset="UTF-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>Conference Dossier Generator</title>
      <style>
        * {
          margin: 0;
          padding: 0;
          box-sizing: border-box;
        }

        body {
          font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
          background: #f9fafb;
          color: #374151;
          min-height: 100vh;
          display: flex;
          justify-content: center;
          padding: 20px;
        }

        .container {
          background: white;
          border-radius: 16px;
          box-shadow: 0 10px 30px rgba(0, 0, 0, 0.08);
          padding: 3rem;
          max-width: 900px;
          width: 100%;
          margin: 40px 0;
        }

        .header {
          text-align: center;
          margin-bottom: 2rem;
        }

        .header h1 {
          color: #166534;
          font-size: 2rem;
          margin-bottom: 0.5rem;
        }

        .header p {
          color: #6b7280;
        }

        .upload-box {
          border: 2px dashed #84CC16;
          background: #f7fee7;
          border-radius: 16px;
          padding: 3rem 2rem;
          text-align: center;
          cursor: pointer;
          transition: all 0.3s ease;
        }

        .upload-box.dragover {
          border-color: #65A30D;
          background: #f0fdf4;
        }

        .upload-box.upload-disabled {
          opacity: 0.6;
          cursor: not-allowed;
        }

        .upload-icon {
          font-size: 3rem;
          margin-bottom: 1rem;
        }

        .upload-text {
          font-size: 1.1rem;
          font-weight: 600;
          margin-bottom: 0.5rem;
        }

        .upload-subtext {
          font-size: 0.9rem;
          color: #6b7280;
        }

        input[type="file"] {
          display: none;
        }

        .error {
          margin-top: 1.5rem;
          padding: 1rem;
          border-radius: 10px;
          background: #fef2f2;
          border: 1px solid #fecaca;
          color: #b91c1c;
          white-space: pre-wrap;
        }

        .button-group, .download-section {
          margin-top: 1.5rem;
          text-align: center;
        }

        button {
          background: linear-gradient(135deg, #65A30D 0%, #84CC16 100%);
          color: white;
          padding: 0.9rem 2rem;
          border: none;
          border-radius: 12px;
          font-size: 1rem;
          font-weight: 500;
          cursor: pointer;
          margin: 0 0.25rem;
        }

        button.secondary {
          background: none;
          color: #6b7280;
          border: 1px solid #d1d5db;
        }

        .processing {
          margin-top: 2rem;
          text-align: center;
        }

        .spinner {
          width: 40px;
          height: 40px;
          margin: 0 auto 1rem;
          border: 4px solid #ecfccb;
          border-top-color: #65A30D;
          border-radius: 50%;
          animation: spin 1s linear infinite;
        }

        @keyframes spin {
          to { transform: rotate(360deg); }
        }

        .results {
          margin-top: 2.5rem;
        }

        .results h2 {
          color: #166534;
          text-align: center;
        }

        .results-text {
          text-align: center;
          color: #6b7280;
          margin-bottom: 1.5rem;
        }

        .response-content {
          line-height: 1.7;
          max-height: 600px;
          overflow-y: auto;
          padding: 1rem;
          border: 1px solid #e5e7eb;
          border-radius: 10px;
        }

        .main-title { color: #166534; text-align: center; font-size: 24px; }
        .major-title { color: #166534; font-size: 20px; text-transform: uppercase; letter-spacing: 1px; margin-top: 25px; }
        .section-title { color: #166534; font-weight: 700; margin-top: 15px; }
        .attendee-name { color: #166534; font-weight: 700; font-size: 18px; }
        .company-name { color: #166534; font-weight: 700; text-decoration: underline; }
        .contact-info { color: #166534; font-weight: 700; text-decoration: underline; }
        .icp-indicator { color: #059669; font-weight: 600; }
        .separator { border: none; border-top: 2px solid #e5e7eb; margin: 25px 0; }
        .profile-photo { width: 100px; height: 100px; border-radius: 50%; object-fit: cover; border: 3px solid #22c55e; }

        .hidden {
          display: none !important;
        }
      </style>
    </head>
    <body>
      <div class="container">
        <div class="header">
          <h1>Conference Dossier Generator</h1>
          <p>Upload CSV and process with n8n workflow</p>
        </div>

        <div class="upload-box" id="upload-box">
          <div class="upload-icon">&#128193;</div>
          <div class="upload-text" id="upload-text">Upload Conference Attendee CSV</div>
          <div class="upload-subtext" id="upload-subtext">Click to upload or drag &amp; drop your CSV file</div>
        </div>
        <input id="file-input" type="file" accept=".csv">

        <div class="error hidden" id="error"></div>

        <div class="button-group hidden" id="button-group">
          <button id="generate-button">Generate Networking Briefs</button>
        </div>

        <div class="processing hidden" id="processing">
          <div class="spinner"></div>
          <div id="processing-text">Processing...</div>
        </div>

        <div class="results hidden" id="results">
          <h2>Networking Briefs</h2>
          <div class="results-text">Your workflow has generated networking briefs.</div>
          <div class="response-content" id="response-content"></div>
          <div class="download-section">
            <button id="download-rtf">Download RTF</button>
            <button id="download-html">Download HTML</button>
            <button class="secondary" id="start-over">Start Over</button>
          </div>
        </div>
      </div>

      <script>
        const uploadBox = document.getElementById('upload-box');
        const fileInput = document.getElementById('file-input');
        const errorBox = document.getElementById('error');
        const buttonGroup = document.getElementById('button-group');
        const processing = document.getElementById('processing');
        const processingText = document.getElementById('processing-text');
        const results = document.getElementById('results');
        const responseContent = document.getElementById('response-content');

        let sessionId = null;
        let isProcessing = false;
        let statusInterval = null;

        function show(el, visible) {
          el.classList.toggle('hidden', !visible);
        }

        function showError(message) {
          errorBox.textContent = message;
          show(errorBox, !!message);
        }

        function setProcessing(active, text) {
          isProcessing = active;
          uploadBox.classList.toggle('upload-disabled', active);
          document.getElementById('upload-text').textContent =
            active ? 'Processing...' : 'Upload Conference Attendee CSV';
          document.getElementById('upload-subtext').textContent =
            active ? 'Please wait while we process your data' : 'Click to upload or drag & drop your CSV file';
          processingText.textContent = text || 'Processing...';
          show(processing, active);
        }

        async function uploadFile(file) {
          const formData = new FormData();
          formData.append('file', file);
          if (sessionId) {
            formData.append('session_id', sessionId);
          }
          try {
            const response = await fetch('/upload', { method: 'POST', body: formData });
            const data = await response.json();
            if (!response.ok) {
              throw new Error(data.error || 'Upload failed');
            }
            sessionId = data.session_id;
            showError('');
            show(results, false);
            show(buttonGroup, true);
          } catch (error) {
            showError(error.message);
          }
        }

        function renderStatus(data) {
          setProcessing(data.is_processing, data.processing_text);
          if (data.is_processing) {
            return;
          }
          clearInterval(statusInterval);
          statusInterval = null;

          if (data.state === 'showing_results') {
            responseContent.innerHTML = data.results_content;
            show(results, true);
            show(buttonGroup, false);
          } else if (data.state === 'showing_error') {
            showError(data.error);
            show(buttonGroup, true);
          }
        }

        async function checkStatus() {
          try {
            const response = await fetch(`/status/${sessionId}`);
            const data = await response.json();
            if (data.error && !data.state) {
              throw new Error(data.error);
            }
            renderStatus(data);
          } catch (error) {
            console.error('Status check error:', error);
            clearInterval(statusInterval);
            setProcessing(false);
            showError('Error checking status');
            show(buttonGroup, true);
          }
        }

        document.getElementById('generate-button').addEventListener('click', async () => {
          if (!sessionId || isProcessing) {
            return;
          }
          show(buttonGroup, false);
          showError('');
          setProcessing(true, 'Sending to n8n webhook...');
          try {
            const response = await fetch(`/generate/${sessionId}`, { method: 'POST' });
            const data = await response.json();
            if (!response.ok) {
              throw new Error(data.error || 'Could not start processing');
            }
            statusInterval = setInterval(checkStatus, 500);
          } catch (error) {
            setProcessing(false);
            showError(error.message);
            show(buttonGroup, true);
          }
        });

        function download(fmt) {
          const link = document.createElement('a');
          link.href = `/download/${sessionId}/${fmt}`;
          document.body.appendChild(link);
          link.click();
          document.body.removeChild(link);
        }

        document.getElementById('download-rtf').addEventListener('click', () => download('rtf'));
        document.getElementById('download-html').addEventListener('click', () => download('html'));

        document.getElementById('start-over').addEventListener('click', async () => {
          if (sessionId) {
            await fetch(`/reset/${sessionId}`, { method: 'POST' });
            sessionId = null;
          }
          fileInput.value = '';
          responseContent.innerHTML = '';
          showError('');
          show(results, false);
          show(buttonGroup, false);
          setProcessing(false);
        });

        uploadBox.addEventListener('click', () => {
          if (!isProcessing) {
            fileInput.click();
          }
        });

        fileInput.addEventListener('change', () => {
          if (!isProcessing && fileInput.files.length > 0) {
            uploadFile(fileInput.files[0]);
          }
        });

        // Drag and drop functionality
        ['dragenter', 'dragover', 'dragleave', 'drop'].forEach(eventName => {
          uploadBox.addEventListener(eventName, e => e.preventDefault(), false);
        });

        ['dragenter', 'dragover'].forEach(eventName => {
          uploadBox.addEventListener(eventName, () => uploadBox.classList.add('dragover'), false);
        });

        ['dragleave', 'drop'].forEach(eventName => {
          uploadBox.addEventListener(eventName, () => uploadBox.classList.remove('dragover'), false);
        });

        uploadBox.addEventListener('drop', e => {
          if (isProcessing) {
            return;
          }
          const file = e.dataTransfer.files[0];
          if (file && file.type === 'text/csv') {
            fileInput.files = e.dataTransfer.files;
            uploadFile(file);
          }
        }, false);
      </script>
    </body>
    </html>
    """
    return render_template_string(html)


if __name__ == "__main__":
    config = app_config.load_config()
    logging.basicConfig(
        level=app_config.get_log_level(config),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app.run(host=app_config.get_host(config), port=app_config.get_port(config))
