"""Shared helpers for routers and services."""
