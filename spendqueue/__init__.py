"""
spendqueue - Source Package

The tiniest spending queue: a personal budget that accrues continuously
over time and gates purchases against the accrued balance.

DESIGN PRINCIPLES:
1. Money is exact decimal, never binary floating point
2. Every command is one load → operate → store cycle
3. Rejections are reported, never silently corrected
4. The state file is always written whole, never patched
5. Storage is swappable behind an interface
"""

__version__ = "0.3.0"
__author__ = "Mordecai Malignatus"
