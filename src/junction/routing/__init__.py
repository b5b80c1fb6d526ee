"""Routing — per-method route table with typed-capture pattern matching.

Routes are registered during setup and frozen before the first request.
"""
