"""Clients for the external services a case is written to."""
