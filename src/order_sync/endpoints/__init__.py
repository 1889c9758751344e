"""Ingestion endpoints, one router per channel, plus admin passthrough routes."""
