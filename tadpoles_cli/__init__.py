"""
tadpoles-cli: mirror a Tadpoles event feed into a local, date-organized archive.
"""

__version__ = "1.0.0"
