"""Flask application factory for the py-mmu dashboard.

The ``create_app`` function wraps an ``Mmu`` (a fresh one by default)
and returns a Flask app with read-only JSON endpoints:

- ``GET /api/status`` — running pid, ready pids and frame usage.
- ``GET /api/frames`` — mapcount of every frame in use.
- ``GET /api/processes/<pid>/pagetable`` — valid entries of one process.
- ``GET /api/log`` — the MMU event log.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify

from py_mmu.mmu import Mmu

_HTTP_NOT_FOUND = 404


def create_app(mmu: Mmu | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        mmu: The MMU to expose; a freshly booted one if omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    if mmu is None:
        mmu = Mmu()
    context = mmu.context

    app = Flask(__name__)

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return scheduler and frame usage summary."""
        frames = context.frames
        return jsonify(
            {
                "current": context.current.pid,
                "ready": [p.pid for p in context.ready],
                "total_frames": frames.total_frames,
                "free_frames": frames.free_frames,
                "shared_frames": frames.shared_frame_count,
            }
        )

    @app.route("/api/frames")
    def frames() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return ``{pfn: mapcount}`` for every frame in use."""
        return jsonify({str(frame): count for frame, count in context.frames.in_use()})

    @app.route("/api/processes/<int:pid>/pagetable")
    def pagetable(pid: int) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return the valid entries of one process's page table."""
        process = context.find(pid)
        if process is None:
            return jsonify({"error": f"No process with pid {pid}"}), _HTTP_NOT_FOUND
        entries = [
            {
                "vpn": vpn,
                "pfn": pte.frame,
                "state": str(pte.state),
                "writable": pte.writable,
                "private": pte.private,
            }
            for vpn, pte in process.page_table.entries()
        ]
        return jsonify({"pid": pid, "state": str(process.state), "entries": entries})

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the event log, oldest first."""
        return jsonify({"entries": [str(entry) for entry in context.logger.entries]})

    return app


def main() -> None:
    """Run the dashboard development server.

    This is the ``py-mmu-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
