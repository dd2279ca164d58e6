"""Tests for reading Apple Wallet passes."""

from datetime import datetime, timezone

import pytest

from bcbpdecoder.pkpass import PKPass


@pytest.fixture
def pkpass_path(tmp_path, full_bcbp, write_pkpass):
    """A pass using the barcodes list."""
    return write_pkpass(tmp_path / "flight.pkpass", {
        'relevantDate': "2025-04-10T08:00:00+01:00",
        'barcodes': [{
            'format': "PKBarcodeFormatPDF417",
            'message': full_bcbp,
            'messageEncoding': "iso-8859-1",
        }],
    })


class TestPKPass:
    """Test PKPass loading and decoding."""

    def test_message_and_relevant_date(self, pkpass_path, full_bcbp):
        """The barcode message and UTC relevant date are read."""
        pkpass = PKPass(pkpass_path)
        assert pkpass.message == full_bcbp
        assert pkpass.relevant_date == datetime(
            2025, 4, 10, 7, 0, tzinfo=timezone.utc
        )

    def test_decode_uses_relevant_date(self, pkpass_path):
        """The relevant date sets the year for dates on the pass."""
        outcome = PKPass(pkpass_path).decode()
        assert outcome.valid
        bp = outcome.boarding_pass
        assert bp.reference_year == 2025
        assert bp.issuance_date.year == 2025
        assert bp.legs[0].resolve_flight_date().isoformat() == "2025-04-10"

    def test_legacy_barcode_key(self, tmp_path, minimal_bcbp, write_pkpass):
        """Older passes use a single barcode object."""
        path = write_pkpass(tmp_path / "old.pkpass", {
            'barcode': {'message': minimal_bcbp},
        })
        pkpass = PKPass(path)
        assert pkpass.message == minimal_bcbp
        assert pkpass.relevant_date is None
        assert pkpass.decode().valid

    def test_missing_pass_file(self, tmp_path, write_pkpass):
        """An archive without pass.json has no message."""
        pkpass = PKPass(write_pkpass(tmp_path / "empty.pkpass"))
        assert pkpass.pass_json == {}
        assert pkpass.message is None
        outcome = pkpass.decode()
        assert not outcome.valid
        assert "empty.pkpass" in outcome.error

    def test_not_a_zip(self, tmp_path):
        """A file that is not an archive has no message."""
        path = tmp_path / "broken.pkpass"
        path.write_text("not a zip")
        assert PKPass(path).message is None
