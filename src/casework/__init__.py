"""Casework: household intake for municipal social-assistance case records."""
