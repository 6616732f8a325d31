"""
Command-line interface for Netproxy Server.
"""
