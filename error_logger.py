# error_logger.py
"""
Crash logging for the Flask app.

    from error_logger import init_error_logging
    init_error_logging(app)

Every unhandled exception is written to a daily-rotated log file and, when
ERROR_LOG_TO_MONGO is set, also to the ``error_logs`` collection.
"""

import logging
import traceback
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from flask import request, jsonify, render_template_string
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

import config

ERROR_COLLECTION = "error_logs"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

logger = logging.getLogger("error_logger")

# --------------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------------- #
def _utcnow():
    return datetime.now(timezone.utc)

def _log_to_file(exc_info):
    """Write a formatted traceback to the rotating log file."""
    logger.error(
        "=== UNHANDLED EXCEPTION ===\n"
        "Timestamp: %s\n"
        "URL: %s %s\n"
        "Remote: %s\n"
        "User-Agent: %s\n"
        "Form: %s\n"
        "JSON: %s\n"
        "Traceback:\n%s",
        _utcnow().isoformat(),
        request.method,
        request.url,
        request.remote_addr,
        request.headers.get("User-Agent", ""),
        request.form.to_dict(),
        request.get_json(silent=True) or {},
        "".join(traceback.format_exception(*exc_info)),
    )

def _log_to_mongo(exc_info):
    """Persist the same data in MongoDB for later analysis."""
    client = None
    try:
        client = MongoClient(config.MONGODB_URI, serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS)
        client[config.MONGODB_DB][ERROR_COLLECTION].insert_one({
            "timestamp": _utcnow(),
            "method": request.method,
            "url": request.url,
            "remote_addr": request.remote_addr,
            "user_agent": request.headers.get("User-Agent"),
            "form": request.form.to_dict(),
            "json": request.get_json(silent=True) or {},
            "traceback": traceback.format_exception(*exc_info),
            "path": request.path,
            "endpoint": request.endpoint,
        })
    except PyMongoError as mongo_err:
        logger.warning("Failed to write error to MongoDB: %s", mongo_err)
    finally:
        if client is not None:
            client.close()

def _wants_json():
    return request.path.startswith("/api/") or request.headers.get("Accept") == "application/json"

# --------------------------------------------------------------------------- #
# Flask error-handler registration
# --------------------------------------------------------------------------- #
def init_error_logging(flask_app, log_file=None, to_mongo=None):
    """Call this once with your Flask `app` object."""
    log_file = log_file or config.ERROR_LOG_FILE
    to_mongo = config.ERROR_LOG_TO_MONGO if to_mongo is None else to_mongo

    # ---- 1. File logger (daily rotation, keep 30 days) ----
    if not any(h.get_name() == log_file for h in logger.handlers):
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=30, delay=True)
        file_handler.set_name(log_file)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    logger.setLevel(logging.ERROR)

    # ---- 2. Catch-all handler ----
    @flask_app.errorhandler(Exception)
    def handle_uncaught_exception(error):
        if isinstance(error, HTTPException):
            return error
        exc_info = (type(error), error, error.__traceback__)

        _log_to_file(exc_info)
        if to_mongo:
            _log_to_mongo(exc_info)

        # ---- 3. User-friendly response ----
        if _wants_json():
            return (
                jsonify(
                    {
                        "error": "Internal Server Error",
                        "message": "An unexpected error occurred. It has been logged.",
                        "timestamp": _utcnow().isoformat(),
                    }
                ),
                500,
            )
        html = """
        <h1>500 – Internal Server Error</h1>
        <p>Something went wrong. The incident has been recorded (ID: {{ incident }}).</p>
        <p><a href="javascript:window.history.back()">Go back</a> or <a href="/">return home</a>.</p>
        """
        return render_template_string(html, incident=_utcnow().strftime('%Y%m%d%H%M%S')), 500

    # ---- 4. Explicit 404 (JSON for APIs) ----
    @flask_app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not Found"}), 404
        return e.get_response(), 404

    flask_app.logger.info("Error logging initialised (file%s).", " + MongoDB" if to_mongo else "")
