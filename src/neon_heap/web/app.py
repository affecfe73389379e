"""Flask application factory for the NeonHeap web API.

The ``create_app`` function starts a simulator session, creates a
shell, and returns a Flask app exposing both as JSON:

- ``GET /api/state`` — blocks, statistics, history, current algorithm.
- ``GET /api/status`` — running flag and the statistics dashboard.
- ``POST /api/execute`` — execute a shell command and return JSON.
- ``POST /api/allocate`` / ``/api/deallocate`` / ``/api/reset`` /
  ``/api/restore`` — the engine operations.
- ``GET /api/compare`` — run the algorithm comparison.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from neon_heap.comparison import best_algorithm
from neon_heap.config import HeapConfig
from neon_heap.display import format_statistics
from neon_heap.memory import Block, FailureReason
from neon_heap.shell import Shell
from neon_heap.simulator import Simulator

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409

# Allocation failures that mean "the request itself was wrong".
_BAD_REQUEST_REASONS = frozenset({FailureReason.INVALID_SIZE})


def _block_json(block: Block) -> dict[str, Any]:
    """Serialise a block for JSON responses."""
    return {
        "id": block.block_id,
        "start_address": block.start_address,
        "end_address": block.end_address,
        "size": block.size,
        "is_allocated": block.is_allocated,
        "owner": block.owner,
    }


def create_app(config: HeapConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Heap configuration for the session (defaults apply).

    Returns:
        A configured Flask application ready to serve.

    """
    simulator = Simulator(config)
    shell = Shell(simulator=simulator)
    halted = False

    app = Flask(__name__)

    def _state() -> dict[str, Any]:
        manager = simulator.manager
        return {
            "algorithm": str(simulator.algorithm),
            "fragmentation_level": str(simulator.fragmentation_level()),
            "blocks": [_block_json(b) for b in manager.blocks],
            "statistics": manager.get_statistics().to_dict(),
            "history": [entry.label for entry in manager.history],
        }

    @app.route("/api/state")
    def state() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the full heap state."""
        return jsonify(_state())

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return session status for polling.

        Returns:
            JSON with ``running`` and ``status`` fields.

        """
        if halted:
            return jsonify({"running": False, "status": "Simulation ended."})
        text = format_statistics(
            simulator.manager.get_statistics(), simulator.fragmentation_level()
        )
        return jsonify({"running": True, "status": text})

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``halted`` fields.

        """
        nonlocal halted
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        if halted:
            return jsonify({"output": "Simulation ended.", "halted": True})

        result = shell.execute(str(data["command"]))
        if result == Shell.EXIT_SENTINEL:
            halted = True
            return jsonify({"output": "Simulation ended.", "halted": True})
        return jsonify({"output": result, "halted": False})

    @app.route("/api/allocate", methods=["POST"])
    def allocate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Allocate memory.

        Expects JSON body: ``{"size": int, "name": str?, "algorithm": str?}``
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object"}), _HTTP_BAD_REQUEST
        size = data.get("size")
        if not isinstance(size, int) or isinstance(size, bool):
            return jsonify({"error": "'size' must be an integer"}), _HTTP_BAD_REQUEST
        for key in ("name", "algorithm"):
            if not isinstance(data.get(key, ""), str | None):
                return jsonify({"error": f"'{key}' must be a string"}), _HTTP_BAD_REQUEST

        result = simulator.allocate(size, data.get("name"), data.get("algorithm"))
        if not result:
            code = _HTTP_BAD_REQUEST if result.reason in _BAD_REQUEST_REASONS else _HTTP_CONFLICT
            return jsonify(result.to_dict()), code
        return jsonify({**result.to_dict(), "state": _state()})

    @app.route("/api/deallocate", methods=["POST"])
    def deallocate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Deallocate a process.  Expects JSON body: ``{"name": str}``."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            return jsonify({"error": "Missing 'name' field"}), _HTTP_BAD_REQUEST

        result = simulator.deallocate(data["name"])
        if not result:
            return jsonify(result.to_dict()), _HTTP_NOT_FOUND
        return jsonify({**result.to_dict(), "state": _state()})

    @app.route("/api/reset", methods=["POST"])
    def reset() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Reset the heap to its initial state."""
        simulator.reset()
        return jsonify({"ok": True, "state": _state()})

    @app.route("/api/restore", methods=["POST"])
    def restore() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Rewind to a snapshot.  Expects JSON body: ``{"index": int}``."""
        data = request.get_json(silent=True)
        index = data.get("index") if isinstance(data, dict) else None
        if not isinstance(index, int) or isinstance(index, bool):
            return jsonify({"error": "'index' must be an integer"}), _HTTP_BAD_REQUEST

        if not simulator.restore(index):
            return jsonify({"ok": False, "reason": str(FailureReason.INVALID_HISTORY_INDEX)}), (
                _HTTP_NOT_FOUND
            )
        return jsonify({"ok": True, "state": _state()})

    @app.route("/api/compare")
    def compare() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Run the algorithm comparison and return per-algorithm results."""
        results = simulator.compare()
        return jsonify(
            {
                "best": str(best_algorithm(results)),
                "results": {
                    str(algo): {
                        "statistics": r.statistics.to_dict(),
                        "failures": list(r.failures),
                        "avg_time_ms": r.avg_time_ms,
                        "blocks": [_block_json(b) for b in r.blocks],
                    }
                    for algo, r in results.items()
                },
            }
        )

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``neon-heap-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
