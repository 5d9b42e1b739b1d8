"""User authentication and administration API."""
