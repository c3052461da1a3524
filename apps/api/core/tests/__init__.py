"""Tests for the API core: settings, logging and error handlers."""
