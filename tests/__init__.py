"""Tests for the Geowatch integration."""
