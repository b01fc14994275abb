#!/usr/bin/env python3

# local modules
from wobblesync.cli import cli

if __name__ == "__main__":
    cli()
