#!/usr/bin/env python3
# cipherkeep/plugins/session/__init__.py
CATEGORY_DESCRIPTION = "Unlock, lock and re-key the store."
