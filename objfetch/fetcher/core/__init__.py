"""
Core types, errors and collaborator interfaces for the object fetcher.
"""
