"""
Sleft Signals Core Metadata
---------------------------
Project identity shared by the backend root route and the Streamlit overview.
"""

from datetime import date

__project__ = "Sleft Signals"
__version__ = "1.0.0"
__maintainer__ = "Sleft Health"
__updated__ = date.today().isoformat()

CORE_METADATA = {
    "project": __project__,
    "version": __version__,
    "maintainer": __maintainer__,
    "updated": __updated__,
    "description": (
        "Sleft helps local businesses and healthcare providers find referral "
        "partners: complementary practices that can send them customers."
    ),
    "features": [
        "Referral Snapshots",
        "Strategy Briefs",
        "Discovery Chat",
        "Provider Network",
        "Vendor Reviews",
    ],
}


def get_metadata() -> dict:
    """Return current system metadata as a dict."""
    return CORE_METADATA
