"""Ingestion layer.

Converts raw API payloads into validated city records before they reach
the state store.
"""
