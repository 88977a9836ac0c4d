#!/usr/bin/env python3
"""
Entry point for cephfs-provisioner CLI tool.
"""

import sys

from cephfs_provisioner.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
