"""Thumbnailer for fuzzpaint (``.fzp``) documents."""

__version__ = "0.1.0"
