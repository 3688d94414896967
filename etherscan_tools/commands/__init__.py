"""The verify and import commands."""
