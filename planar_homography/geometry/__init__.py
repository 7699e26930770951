"""Correspondence model, DLT restrictions and the SVD solve."""
