"""Shared helpers for marathon-deployer."""
