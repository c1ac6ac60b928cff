"""Tenant scope command-line interface."""
