"""Tests for fastmode."""
