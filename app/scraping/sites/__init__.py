"""
Built-in site adapters.
"""

from app.scraping.sites.dhc import DHCAdapter
from app.scraping.sites.innisfree import InnisfreeAdapter
from app.scraping.sites.vt_cosmetics import VTCosmeticsAdapter

__all__ = ["DHCAdapter", "InnisfreeAdapter", "VTCosmeticsAdapter"]
