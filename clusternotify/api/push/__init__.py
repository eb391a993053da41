"""Pub/Sub push endpoint resource."""
