"""Functions for CLI commands."""

# Standard imports
import os
import sys
from pathlib import Path

# Third-party imports
import colorama
from tabulate import tabulate

# Project imports
from bcbpdecoder.boarding_pass import BoardingPass, DecodeOutcome, decode
from bcbpdecoder.pkpass import PKPass

colorama.init()

def decode_bcbp(bcbp_str: str) -> None:
    """Decodes a BCBP string and prints a summary."""
    outcome = decode(bcbp_str, reference_year=reference_year())
    _exit_if_invalid(outcome)
    print_summary(outcome.boarding_pass)

def decode_pkpass(path: str) -> None:
    """Decodes the boarding pass in a .pkpass file and prints a summary."""
    pkpass = PKPass(Path(path))
    outcome = pkpass.decode(reference_year=reference_year())
    _exit_if_invalid(outcome)
    print_summary(outcome.boarding_pass)

def decode_pkpasses() -> None:
    """Decodes every .pkpass file in the import folder."""
    import_folder = os.getenv("BCBP_IMPORT_PATH")
    if import_folder is None:
        raise KeyError(
            "Environment variable BCBP_IMPORT_PATH is missing."
        )
    import_path = Path(import_folder)
    if not import_path.is_dir():
        raise KeyError(
            "Environment variable BCBP_IMPORT_PATH is not a directory."
        )
    print(f"Decoding digital boarding passes from {import_path}")
    pkpasses = sorted(f for f in import_path.glob("*.pkpass") if f.is_file())
    if len(pkpasses) == 0:
        print("ℹ️ No .pkpass files found.")
        return
    for path in pkpasses:
        print(f"Processing {path.name}")
        outcome = PKPass(path).decode(reference_year=reference_year())
        if not outcome.valid:
            _print_warning(f"⚠️ {outcome.error} Skipping this pass.")
            continue
        print_summary(outcome.boarding_pass)

def inspect_bcbp(bcbp_str: str) -> None:
    """Prints the segment table for a BCBP string."""
    outcome = decode(bcbp_str, reference_year=reference_year())
    _exit_if_invalid(outcome)
    boarding_pass = outcome.boarding_pass
    print(str(boarding_pass))
    print(segment_table(boarding_pass))
    unread = len(boarding_pass.bcbp_str) - boarding_pass.consumed_length
    if unread > 0:
        _print_warning(f"⚠️ {unread} trailing character(s) were not decoded.")

def print_summary(boarding_pass: BoardingPass) -> None:
    """Prints the decoded fields of a boarding pass."""
    reference = boarding_pass.reference
    print(f"👤 {boarding_pass.passenger_name}")
    rows = []
    for i, leg in enumerate(boarding_pass.legs):
        rows.append([
            i + 1,
            leg.resolve_flight_date() or leg.date_of_flight,
            f"{reference.airline_name(leg.operating_carrier)} "
            f"{leg.flight_number}",
            reference.airport_label(leg.departure_airport),
            reference.airport_label(leg.arrival_airport),
            leg.seat_number,
            leg.compartment_description,
            leg.check_in_sequence,
            leg.passenger_status_description,
            leg.pnr,
        ])
    print(tabulate(rows,
        headers=[
            "Leg", "Date", "Flight", "From", "To", "Seat", "Class", "Seq",
            "Status", "PNR",
        ],
        disable_numparse=True,
    ))
    if boarding_pass.issuance_date is not None:
        print(f"Issued: {boarding_pass.issuance_date.date}")
    if boarding_pass.document_type is not None:
        print(f"Document: {boarding_pass.document_type_description}")
    for tag in boarding_pass.baggage_tags:
        print(
            f"🧳 {tag.airline_code} {tag.serial_number} "
            f"({tag.bag_count} bag(s))"
        )
    for warning in boarding_pass.warnings:
        _print_warning(f"⚠️ {warning}")

def reference_year() -> int | None:
    """Gets the reference year override from the environment."""
    year = os.getenv("BCBP_REFERENCE_YEAR")
    if year is None:
        return None
    try:
        return int(year)
    except ValueError as err:
        raise KeyError(
            "Environment variable BCBP_REFERENCE_YEAR is not a year."
        ) from err

def segment_table(boarding_pass: BoardingPass) -> str:
    """Formats the segments of a boarding pass as a table."""
    table = [
        [
            s.start,
            s.end,
            s.section,
            s.label,
            s.raw.replace(" ", "·"),
            s.description,
        ]
        for s in boarding_pass.segments
    ]
    return tabulate(table,
        headers=["Start", "End", "Section", "Field", "Raw", "Description"],
        disable_numparse=True,
    )

def _exit_if_invalid(outcome: DecodeOutcome) -> None:
    """Exits if decoding failed."""
    if outcome.valid:
        return
    print(
        colorama.Fore.RED
        + f"⚠️ The boarding pass data is not valid: {outcome.error}"
        + colorama.Style.RESET_ALL
    )
    sys.exit(1)

def _print_warning(message: str) -> None:
    """Prints a warning in yellow."""
    print(
        colorama.Fore.YELLOW
        + message
        + colorama.Style.RESET_ALL
    )
