"""saml-test-util: Admin diagnostic "whoami" pages for SAML authentication sources.

Lists configured authentication sources, runs a login against a selected
source and shows the resolved identity attributes, recovering failures that
happened while control was with the identity provider.
"""

__version__ = "0.1.0"
