"""AutoNinja marketplace API."""
