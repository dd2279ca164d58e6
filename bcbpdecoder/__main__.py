"""Tools for decoding Bar-Coded Boarding Pass data."""

# Standard imports
import argparse

# Third-party imports
from dotenv import load_dotenv

# Project imports
import bcbpdecoder.tools as bt

def main(argv=None):
    """Runs the command line interface."""
    # Load environment variables from .env file.
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Tools for decoding Bar-Coded Boarding Pass data."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # decode
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode a boarding pass and print its fields",
    )
    decode_source_group = decode_parser.add_mutually_exclusive_group(
        required=True,
    )
    decode_source_group.add_argument("--bcbp",
        help="Decode a BCBP-coded text string",
        metavar="BCBP_TEXT",
        type=str,
    )
    decode_source_group.add_argument("--pkpass",
        help="Decode the boarding pass in a .pkpass file",
        metavar="PATH",
        type=str,
    )
    decode_source_group.add_argument("--pkpasses",
        action="store_true",
        help="Decode .pkpass files in the import folder",
    )

    # inspect
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show which field covers each character of a BCBP string",
    )
    inspect_parser.add_argument("--bcbp",
        help="BCBP-coded text string",
        metavar="BCBP_TEXT",
        required=True,
        type=str,
    )

    # Parse arguments
    args = parser.parse_args(argv)
    if args.command == "decode":
        if args.bcbp is not None:
            bt.decode_bcbp(args.bcbp)
        elif args.pkpass is not None:
            bt.decode_pkpass(args.pkpass)
        elif args.pkpasses:
            bt.decode_pkpasses()
    elif args.command == "inspect":
        bt.inspect_bcbp(args.bcbp)

if __name__ == "__main__":
    main()
