"""
platformcli - command-line tool for cloud application deployments

Manages SSH keys and environment variables through the platform API, and
builds applications locally before they are deployed.
"""

__version__ = "0.1.0"
__author__ = "platformcli contributors"
