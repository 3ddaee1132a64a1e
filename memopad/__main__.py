#!/usr/bin/env python3
'''
Copyright 2025 Aaron Vose (avose@aaronvose.net)
Licensed under the LGPL v2.1; see the file 'LICENSE' for details.
'''

import sys
import argparse

from memopad.app import main

def cli():
    parser = argparse.ArgumentParser(description="MemoPad note store")
    parser.add_argument(
        "--store-dir",
        default=None,
        help="Directory holding the memo store (default: ~/.memopad)"
    )
    parser.add_argument(
        "--verbosity",
        type=int, default=None,
        help="Set verbosity level (0=quiet, 1=normal, 2=verbose, 3+=debug)"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write the session log to this file on exit."
    )
    parser.add_argument(
        "--stdexp",
        action="store_true",
        help="Use standard exception handling to stdout / stderr."
    )
    args = parser.parse_args()

    return main(
        verbosity=args.verbosity, stdexp=args.stdexp,
        store_dir=args.store_dir, log_file=args.log_file,
    )

if __name__ == "__main__":
    sys.exit(cli())
