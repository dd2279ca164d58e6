"""Shared boarding pass samples for the test suite."""

import json
import zipfile

import pytest

MINIMAL_BCBP = "M1DOE/JOHN            EABCDEF LHRJFKBA 00123100Y012A0000110 0"


def build_header(legs="1", name="DOE/JOHN", eticket="E"):
    """Builds the 23-character mandatory unique block."""
    return f"M{legs}{name:<20}{eticket}"


def build_leg(
    pnr="ABCDEF", departure="LHR", arrival="JFK", carrier="BA",
    flight="00123", julian="100", compartment="Y", seat="012A",
    sequence="00001", status="1", conditional="", size=None,
):
    """Builds a 37-character mandatory leg block plus conditional data."""
    if size is None:
        size = f"{len(conditional):02X}"
    return (
        f"{pnr:<7}{departure}{arrival}{carrier:<3}{flight:<5}{julian}"
        f"{compartment}{seat:<4}{sequence:<5}{status}{size}{conditional}"
    )


def build_unique(version="6", body="", size=None):
    """Builds a unique conditional section starting with '>'."""
    if size is None:
        size = f"{len(body):02X}"
    return f">{version}{size}{body}"


def build_leg_conditional(
    airline_numeric="125", serial="1234567890", selectee="0",
    verification=" ", marketing="BA", ff_airline="BA",
    ff_number="12345678", id_adherence=" ", baggage="20K", fast_track="Y",
):
    """Builds a repeated conditional section with its size prefix."""
    body = (
        f"{airline_numeric}{serial:<10}{selectee}{verification}"
        f"{marketing:<3}{ff_airline:<3}{ff_number:<16}{id_adherence}"
        f"{baggage:<3}{fast_track}"
    )
    return f"{len(body):02X}{body}"


UNIQUE_BODY = "0WW0345BBA " + "0125123456001"


@pytest.fixture
def minimal_bcbp():
    """The smallest accepted single-leg pass."""
    return MINIMAL_BCBP


@pytest.fixture
def full_bcbp():
    """A single-leg pass with every conditional section and security data."""
    conditional = (
        build_unique("6", UNIQUE_BODY) + build_leg_conditional() + "XYZ"
    )
    return build_header() + build_leg(conditional=conditional) + "^105ABCDE"


@pytest.fixture
def two_leg_bcbp():
    """A two-leg pass without conditional data."""
    return (
        build_header(legs="2")
        + build_leg()
        + build_leg(
            pnr="GHIJKL", departure="JFK", arrival="LAX", carrier="AA",
            flight="00100", julian="101", compartment="F", seat="001A",
            sequence="00002", status="0",
        )
    )


@pytest.fixture
def builders():
    """Functions for building custom passes."""
    return {
        'header': build_header,
        'leg': build_leg,
        'unique': build_unique,
        'leg_conditional': build_leg_conditional,
    }


def _write_pkpass(path, pass_json=None):
    """Writes a .pkpass archive, optionally containing pass.json."""
    with zipfile.ZipFile(path, 'w') as zf:
        zf.writestr("manifest.json", "{}")
        if pass_json is not None:
            zf.writestr("pass.json", json.dumps(pass_json))
    return path


@pytest.fixture
def write_pkpass():
    """Function for writing .pkpass archives."""
    return _write_pkpass
