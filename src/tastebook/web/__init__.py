"""Tastebook - HTTP API."""
