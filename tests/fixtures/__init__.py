"""Test fixtures for the chain visualizer."""
