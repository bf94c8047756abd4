"""Household intake wizard: record model, validation, editing and submission."""
