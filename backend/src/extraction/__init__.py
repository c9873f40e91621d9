"""Extraction oracle client and attribute sanitization."""
