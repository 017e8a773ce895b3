"""Test package for the-hub."""
