"""
Tests for the generic repository and its listener pipeline.
"""
