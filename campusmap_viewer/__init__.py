"""Headless client for the campus map: state store, map interaction and forms."""
