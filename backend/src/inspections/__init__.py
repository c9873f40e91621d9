"""Inspection lists, product records and novelty classification."""
