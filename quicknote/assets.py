"""
QuickNote - Embedded Static Assets
====================================

What:  Binary assets served without touching the filesystem, so the same
       package works unchanged inside AWS Lambda.
"""

import base64

FAVICON_CONTENT_TYPE = "image/x-icon"

# 1x1 ICO container wrapping a PNG image (22-byte ICONDIR + entry, then PNG)
FAVICON_ICO: bytes = base64.b64decode(
    "AAABAAEAAQEAAAEAIABEAAAAFgAAAIlQTkcNChoKAAAADUlIRFIAAAABAAAAAQgEAAAAtRwMAgAA"
    "AAtJREFUeNpjZGAAAAAGAAIwgdAvAAAAAElFTkSuQmCC"
)
