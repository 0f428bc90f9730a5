"""Utility functions for layer generation."""

from .hashing import compute_file_hash, compute_layer_hashes, hash_layer_stream

__all__ = ["compute_file_hash", "compute_layer_hashes", "hash_layer_stream"]
