"""Sample applications documented by :mod:`apidoc`."""
