"""
Open Assets CLI Commands Package

Command modules for the Open Assets CLI.
"""

__all__ = ['marker', 'tx']
