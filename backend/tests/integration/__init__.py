"""Integration tests for the face trainer runtime.

These tests verify the complete stack against a SQLite database:
- Face listing and deletion through the cache
- Classifier training, storage, eviction and prediction
- Concurrent reads and writes
"""
