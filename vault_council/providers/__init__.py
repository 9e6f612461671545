"""Model gateways."""
