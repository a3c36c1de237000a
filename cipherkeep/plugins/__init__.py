#!/usr/bin/env python3
# cipherkeep/plugins/__init__.py
"""Shell command packages; each subpackage's entrypoint registers its commands."""
