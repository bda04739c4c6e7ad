"""Campus map REST API."""
