"""Validation controller and per-document state store."""
