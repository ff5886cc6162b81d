"""
Caddy Log Monitor - live viewer and dashboard for Caddy JSON access logs
"""

__version__ = "0.6.3"
