"""
Test support utilities for pkg-export-tar tests.

Helpers that are not pytest fixtures live here; see :mod:`_support.hab`
for on-disk package layouts, ``.hart`` writers and the fake installer.
"""
