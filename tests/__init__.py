"""Tests for the Clarus Mens API."""
