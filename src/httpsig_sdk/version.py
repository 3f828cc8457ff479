"""Version information for the HTTP Signing Python SDK"""

__version__ = "0.1.0"
