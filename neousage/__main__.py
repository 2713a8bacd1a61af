"""
Entry point for running neousage as a module: python -m neousage
"""

from neousage.cli.commands import app

if __name__ == "__main__":
    app()
