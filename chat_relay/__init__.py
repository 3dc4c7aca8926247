"""Notebook chat relay: forwards notebook chat messages to the n8n chat workflow."""

__version__ = "0.1.0"
