"""Shell command workflows: templates, YAML and remote stores, search, parameter filling and shell snippets."""

__version__ = "0.1.0"