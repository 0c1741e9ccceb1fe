import logging
import os
import socket
import subprocess
import sys
import time

import webview

import app_config

logger = logging.getLogger(__name__)

# Configuration
APP_TITLE = "Conference Dossier Generator"
PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
SERVER_SCRIPT = os.path.join(PROJECT_DIR, "gui_launcher.py")
STARTUP_ATTEMPTS = 30
STARTUP_INTERVAL = 0.5


def is_port_open(port):
    """Check if a port is open"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        return sock.connect_ex(('127.0.0.1', port)) == 0
    finally:
        sock.close()


def start_flask_server(port):
    """Start the Flask server in the background and wait for it to listen.

    Returns:
        subprocess.Popen or None: The server process, or None if it never came up
    """
    env = dict(os.environ, DOSSIER_PORT=str(port))
    process = subprocess.Popen(
        [sys.executable, SERVER_SCRIPT],
        cwd=PROJECT_DIR,
        env=env,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL
    )

    logger.info("Starting server on port %d...", port)
    for _ in range(STARTUP_ATTEMPTS):
        if is_port_open(port):
            logger.info("Server is ready")
            return process
        if process.poll() is not None:
            logger.error("Server exited with code %s", process.returncode)
            return None
        time.sleep(STARTUP_INTERVAL)

    process.terminate()
    return None


def main():
    logging.basicConfig(level=logging.INFO)
    port = app_config.get_port()
    server = None

    # Reuse a server that is already running
    if not is_port_open(port):
        server = start_flask_server(port)
        if server is None:
            logger.error("Failed to start server!")
            sys.exit(1)

    webview.create_window(
        title=APP_TITLE,
        url=f"http://127.0.0.1:{port}",
        width=950,
        height=900,
        resizable=True,
        background_color='#f9fafb'
    )
    webview.start(debug=False)

    # Cleanup on exit
    if server is not None:
        server.terminate()


if __name__ == "__main__":
    main()
