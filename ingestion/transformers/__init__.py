"""Candidate deduplication/batching and record normalization."""
