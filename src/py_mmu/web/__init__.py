"""Browser dashboard for py-mmu.

This package provides a Flask application that exposes the MMU state as
JSON.  It is an **optional** extra — install with::

    pip install py-mmu[web]

The ``create_app`` factory in ``app.py`` serves read-only endpoints for
the scheduler, the frame registry, per-process page tables and the log.
"""
