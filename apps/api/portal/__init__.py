"""Organisation portal API."""
