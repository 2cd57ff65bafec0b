"""
Open Assets Protocol - Command Line Interface Package
"""

__version__ = '1.0.0'
