"""CLI module for valconsole."""
