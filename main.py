#!/usr/bin/env python3
"""patchmerge - three-way conflict resolution for patch submissions."""

from patchmerge.cli import main

if __name__ == "__main__":
    main()
