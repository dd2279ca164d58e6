"""Tools for reading boarding pass data from Apple Wallet passes."""

# Standard imports
import json
import logging
from datetime import datetime
from pathlib import Path
from zipfile import ZipFile, BadZipFile
from zoneinfo import ZoneInfo

# Third-party imports
from dateutil.parser import isoparse

# Project imports
from bcbpdecoder.boarding_pass import DecodeOutcome, decode
from bcbpdecoder.reference import ReferenceTables, DEFAULT_REFERENCE

logger = logging.getLogger(__name__)

class PKPass():
    """Represents an Apple Wallet PKPass boarding pass."""
    PASS_FILE = "pass.json"

    def __init__(self, path: Path):
        self.path = Path(path)
        self.pass_json: dict = self._load_pass_json()
        self.relevant_date: datetime | None = self._parse_relevant_date()
        self.message: str | None = self._parse_message()

    def decode(self,
        reference: ReferenceTables = DEFAULT_REFERENCE,
        reference_year: int | None = None,
    ) -> DecodeOutcome:
        """Decodes the barcode message as a BCBP string."""
        if self.message is None:
            return DecodeOutcome(
                error=f"{self.path.name} does not contain a barcode message."
            )
        return decode(
            self.message,
            pass_dt=self.relevant_date,
            reference=reference,
            reference_year=reference_year,
        )

    def _load_pass_json(self) -> dict:
        """Gets boarding pass JSON."""
        try:
            with ZipFile(self.path, 'r') as zf:
                if PKPass.PASS_FILE not in zf.namelist():
                    logger.debug(
                        "%s not found in %s.", PKPass.PASS_FILE, self.path
                    )
                    return {}
                with zf.open(PKPass.PASS_FILE) as pf:
                    return json.loads(pf.read().decode('utf-8'))
        except (BadZipFile, json.JSONDecodeError, UnicodeDecodeError) as err:
            logger.debug("Could not read %s: %s", self.path, err)
            return {}

    def _parse_message(self) -> str | None:
        """Gets the barcode message."""
        # Newer passes use a barcodes list; older ones a single barcode.
        barcodes = self.pass_json.get('barcodes') or []
        for barcode in barcodes:
            if barcode.get('message') is not None:
                return barcode['message']
        return self.pass_json.get('barcode', {}).get('message')

    def _parse_relevant_date(self) -> datetime | None:
        """Gets the PKPass date."""
        try:
            pass_date = isoparse(self.pass_json.get('relevantDate'))
            return pass_date.astimezone(ZoneInfo("UTC"))
        except (TypeError, ValueError):
            return None
