"""Command-line front end: argument parsing, output and the error boundary.

Imports from ``core``, ``infra`` and ``utils``; nothing imports from here.
"""
