"""
Entry point for running valconsole as a module: python -m valconsole
"""

from valconsole.cli.commands import app

if __name__ == "__main__":
    app()
