"""
Convenience entry point for running slotplanner directly.

Usage: python -m slotplanner [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
