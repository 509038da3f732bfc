"""
Melodia - personalised song generation backend
"""

__version__ = "0.1.0"
