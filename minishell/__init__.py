"""A small command shell: lexer, parser, builtins, redirections, pipelines and the read loop."""

__version__ = "0.1.0"