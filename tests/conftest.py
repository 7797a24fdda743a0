"""Shared fixtures: namespaced DrawingML / PresentationML fragments."""

import pytest
from lxml import etree

A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

_NSDECL = f'xmlns:a="{A_NS}" xmlns:p="{P_NS}" xmlns:r="{R_NS}"'


def xml(fragment: str):
    """Parse a fragment whose root uses a:/p:/r: prefixes without declaring them."""
    fragment = fragment.strip()
    # inject the declarations into the root start tag
    end = fragment.index(">")
    if fragment[end - 1] == "/":
        end -= 1
    return etree.fromstring(f"{fragment[:end]} {_NSDECL}{fragment[end:]}")


@pytest.fixture
def theme_colors():
    return {
        "dk1": "000000",
        "lt1": "FFFFFF",
        "dk2": "44546A",
        "lt2": "E7E6E6",
        "accent1": "4472C4",
        "accent2": "ED7D31",
        "accent3": "A5A5A5",
        "accent4": "FFC000",
        "accent5": "5B9BD5",
        "accent6": "70AD47",
        "hlink": "0563C1",
        "folHlink": "954F72",
    }


@pytest.fixture
def resolver(theme_colors):
    from src.parsers.colors import create_color_resolver

    return create_color_resolver(theme_colors)
