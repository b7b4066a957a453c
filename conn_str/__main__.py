#!/usr/bin/env python3
"""
conn_str package main entry point

Allows running: python -m conn_str
"""

from .cli import app

if __name__ == "__main__":
    app()
