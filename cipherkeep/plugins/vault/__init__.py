#!/usr/bin/env python3
# cipherkeep/plugins/vault/__init__.py
CATEGORY_DESCRIPTION = "Find, add, generate and edit stored secrets."
