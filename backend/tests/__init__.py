"""Tests for the PEACH permit status sync."""
