"""Core services: configuration, security layer, sandbox and scraping."""
