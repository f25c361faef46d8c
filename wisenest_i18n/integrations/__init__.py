"""
Integrations module - capabilities of external platforms injected at startup
"""

from wisenest_i18n.integrations.line import (
    LineProfile,
    LineCapability,
    MockLineCapability,
    LineApiCapability,
    select_line_capability,
)
