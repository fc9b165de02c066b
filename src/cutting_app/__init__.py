"""Command line front end: load a context, solve it, save the result."""
