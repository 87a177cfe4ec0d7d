"""Tests for siteops.utils."""
