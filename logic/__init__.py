"""Interaction logic behind the check-in and chat pages."""
