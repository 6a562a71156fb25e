"""
rookie-cli: install and manage Android apps over adb, from local APKs or a
remote catalog.
"""

__version__ = "0.3.0"
