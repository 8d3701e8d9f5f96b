from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, request, url_for

from ..container import Container

logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if value is not None and hasattr(value, "isoformat") else value


def register(app: Flask, container: Container) -> None:
    @app.route("/sync", methods=["POST"], endpoint="sync_all")
    def sync_all():
        results = [service.sync() for service in container.sync_services.values()]

        if not results:
            flash("No attendance source is configured.", "warning")
        else:
            message = "Sync completed! " + " ".join(r.summary() + "." for r in results)
            flash(message, "success" if all(r.ok for r in results) else "warning")

        return redirect(request.referrer or url_for("sync_status"))

    @app.route("/sync/status", endpoint="sync_status")
    def sync_status():
        sources = {}
        for name, service in container.sync_services.items():
            stats = {k: _iso(v) for k, v in service.adapter.get_stats().items()}
            sources[name] = {
                "connected": service.test_connection(),
                "watermark": _iso(service.last_watermark()),
                "stats": stats,
            }

        last_recorded = {}
        try:
            last_recorded = {k: _iso(v) for k, v in container.attendance_repo.last_recorded_at().items()}
        except Exception:
            # Status page still renders when the target DB is down.
            logger.warning("Cannot read last attendance timestamps", exc_info=True)

        return jsonify({"sources": sources, "last_sync": last_recorded})

    @app.route("/sync/test-connections", endpoint="sync_test_connections")
    def test_connections():
        return jsonify({name: service.test_connection() for name, service in container.sync_services.items()})
