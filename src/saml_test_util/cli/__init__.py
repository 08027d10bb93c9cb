"""Command-line interface for the SAML Test Utility."""
