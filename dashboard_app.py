"""
Flask JSON API over the call analytics dashboard.
Run: python dashboard_app.py
Open: http://127.0.0.1:5000/api/charts
"""

import threading
from typing import Optional

from flask import Flask, jsonify, request

from calldash.config import CONFIG
from calldash.dashboard.shell import DashboardShell
from calldash.data.models import dataset_to_payload, is_valid_email
from calldash.persistence.factory import build_gateway
from calldash.utils import get_logger, setup_logging
from calldash.workflow.edit_workflow import WorkflowState

logger = get_logger(__name__)

def _error(message: str, status: int):
    return jsonify({"error": message}), status

def create_app(shell: Optional[DashboardShell] = None) -> Flask:
    if shell is None:
        shell = DashboardShell(build_gateway(CONFIG), confirm_on_fetch_failure=CONFIG.confirm_on_fetch_failure)
    shell.start()

    app = Flask(__name__)
    app.config["SHELL"] = shell
    # the shell has one edit workflow; requests take turns driving it
    edit_lock = threading.Lock()

    @app.route("/api/status")
    def api_status():
        return jsonify({
            "connected": shell.connected,
            "offline": not shell.connected,
            "status": shell.status_label,
        })

    @app.route("/api/charts")
    def api_charts():
        return jsonify(shell.chart_records())

    @app.route("/api/charts/<email>", methods=["GET"])
    def api_saved_chart(email):
        if not is_valid_email(email):
            return _error("Please enter a valid email address.", 400)
        dataset = shell.gateway.fetch(email)
        if dataset is None:
            return _error(f"No saved chart data for {email}.", 404)
        return jsonify({"email": email, "data": dataset_to_payload(dataset)})

    @app.route("/api/charts/<email>", methods=["PUT"])
    def api_save_chart(email):
        body = request.get_json(silent=True) or {}
        counts = body.get("counts")
        if not isinstance(counts, list):
            return _error("Body must contain a 'counts' list.", 400)
        if len(counts) != len(shell.displayed):
            return _error(f"Expected {len(shell.displayed)} counts, got {len(counts)}.", 400)

        with edit_lock:
            return _save_chart(email, counts)

    def _save_chart(email, counts):
        workflow = shell.workflow
        if workflow.is_open:
            workflow.cancel()
        shell.open_edit()
        state = workflow.submit_key(email)

        if state is WorkflowState.COLLECTING_KEY:
            message = workflow.error
            workflow.cancel()
            return _error(message, 400)

        if state is WorkflowState.CONFIRM_OVERWRITE:
            if request.args.get("overwrite", "").lower() not in ("1", "true", "yes"):
                previous = workflow.previous
                workflow.cancel()
                return jsonify({
                    "error": f"Data already exists for {email}. Retry with ?overwrite=true.",
                    "previous": dataset_to_payload(previous) if previous is not None else None,
                }), 409
            workflow.confirm_overwrite()

        for index, raw in enumerate(counts):
            workflow.change_field(index, raw)

        result = shell.save_edit()
        if not result.saved:
            workflow.cancel()
            return _error("Failed to save custom data.", 503)
        return jsonify({"email": email, "data": dataset_to_payload(shell.displayed)})

    return app

if __name__ == "__main__":
    setup_logging(CONFIG.log_level)
    app = create_app()
    app.run(debug=False)
