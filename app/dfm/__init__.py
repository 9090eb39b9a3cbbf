"""dfm - Keep a target directory in sync with repositories of dotfiles."""

__version__ = "1.0.0"
