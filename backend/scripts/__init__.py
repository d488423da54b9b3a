"""
Backend Scripts Module

This module contains utility scripts for database operations and maintenance.

Available scripts:
    - create_admin.py: Creates an admin account (admins cannot sign up)

Usage:
    python -m scripts.create_admin --email admin@example.com --password secret123
"""
