"""Realtime circle chat backend."""
