"""JSON web API for NeonHeap.

This package provides a Flask application that exposes a simulator
session over HTTP.  It is an **optional** extra — install with::

    pip install neon-heap[web]

The ``create_app`` factory in ``app.py`` starts a session, creates a
shell, and serves the engine operations plus a shell endpoint.
"""
