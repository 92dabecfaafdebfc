"""
engineaudit — Node.js engine range auditor.

Detects JavaScript features whose minimum Node.js version is not covered by
every version a package claims to support in package.json's engines field.
"""

__version__ = "0.1.0"
