# inventory_intelligence/batch/__init__.py

from .refresh_job import run_refresh

__all__ = [
    'run_refresh'
]
