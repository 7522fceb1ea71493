"""
CLI layer - Command-line interface.
"""
