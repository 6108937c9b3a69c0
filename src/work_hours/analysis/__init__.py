"""Summaries and reports over recorded shifts."""
