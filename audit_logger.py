# audit_logger.py
# --------------------------------------------------------------
# Audit trail for inventory and sales changes.
# Decorated views record one entry per successful mutation.
# Entries go to the "audit" logger (daily-rotated file), never
# to the document store.
# --------------------------------------------------------------

import json
import logging
import uuid
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import TimedRotatingFileHandler
from flask import request, g

import config

audit_log = logging.getLogger("audit")


def write_audit(action, target_type, target_id, changes):
    """Record a single audit entry."""
    entry = {
        'audit_id'     : str(uuid.uuid4()),
        'timestamp'    : datetime.now(timezone.utc).isoformat(),
        'action'       : action,          # CREATE / UPDATE / DELETE
        'target_type'  : target_type,     # medicine / order
        'target_id'    : target_id,       # medicine id or order id
        'changes'      : changes,
        'ip'           : request.remote_addr,
        'user_agent'   : request.headers.get('User-Agent'),
    }
    audit_log.info(json.dumps(entry, default=str))
    return entry


def record_change(action, target_type, target_id, changes):
    """Called by a view once its mutation has been committed."""
    g.setdefault('audit_changes', []).append((action, target_type, target_id, changes))


# ------------------------------------------------------------------
# Decorator – flushes whatever the view recorded, after it returns
# ------------------------------------------------------------------
def audited(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.audit_changes = []
        response = view(*args, **kwargs)
        for action, target_type, target_id, changes in g.pop('audit_changes', []):
            write_audit(action, target_type, target_id, changes)
        return response
    return wrapper


def diff_records(old, new):
    """{field: {'old': .., 'new': ..}} for every field that changed."""
    old, new = old.to_dict(), new.to_dict()
    return {k: {'old': old.get(k), 'new': v} for k, v in new.items() if old.get(k) != v}


def init_audit(app, log_file=None):
    """Call this once after you create the Flask app."""
    log_file = log_file or config.AUDIT_LOG_FILE
    if not any(h.get_name() == log_file for h in audit_log.handlers):
        handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=90, delay=True)
        handler.set_name(log_file)
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        audit_log.addHandler(handler)
    audit_log.setLevel(logging.INFO)
    app.logger.info("Audit logger attached – inventory and sales changes are now traced.")
