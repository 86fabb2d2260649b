"""
Tests for the storage backends, including the shared backend contract.
"""
