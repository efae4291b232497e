#!/usr/bin/env python3
"""
Blueprint editor CLI - Entry point.

This module allows running the tool as:
    python -m blueprint_editor inspect <string>
    blueprint-editor inspect <string>  (when installed via pip)
"""

from blueprint_editor.cli import main

if __name__ == "__main__":
    main()
