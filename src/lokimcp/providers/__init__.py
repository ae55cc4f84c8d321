"""Backend providers for the Loki tools."""
