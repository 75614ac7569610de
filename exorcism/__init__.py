"""Exorcism -- artifact validation and cleanup for ladder module production output."""

__version__ = "0.3.0"
