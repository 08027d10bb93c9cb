"""Entry point for running saml_test_util as a module.

This allows the package to be executed as:
    python -m saml_test_util
"""

from saml_test_util.cli.main import cli

if __name__ == "__main__":
    cli()
