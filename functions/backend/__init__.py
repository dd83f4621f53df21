"""
Backend package for the spot map client.

This package provides the auth session, document store and blob store
abstractions, each with a Firebase implementation and an in-memory one for
tests and local development.
"""
