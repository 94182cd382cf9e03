"""Musij aggregator service."""
