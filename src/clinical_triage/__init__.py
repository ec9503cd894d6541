"""Deterministic triage of clinical emails and notifications."""
