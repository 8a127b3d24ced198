"""
Messaging utilities for HumanGate.

This package provides the async Redis client wrapper used by the durable
trust store.
"""
