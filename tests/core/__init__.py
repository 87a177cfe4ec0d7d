"""Tests for siteops.core."""
