"""Shared validators package for the application.

Available validators:
- password.py: Password requirements for new accounts
"""
