"""
Main module entry point.

``python -m tracker_guard.main`` starts the worker with its beat scheduler.
"""

from .worker import main

if __name__ == "__main__":
    main()
