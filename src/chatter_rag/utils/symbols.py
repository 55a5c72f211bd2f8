"""Console symbols with ASCII fallbacks for legacy Windows code pages."""

import sys

USE_ASCII_FALLBACKS = bool(
    sys.stdout.encoding and sys.stdout.encoding.lower() in ('cp1252', 'cp850', 'ascii')
)

SYMBOLS = {
    'info': 'i' if USE_ASCII_FALLBACKS else 'ℹ',
    'warning': '!' if USE_ASCII_FALLBACKS else '⚠',
    'error': 'X' if USE_ASCII_FALLBACKS else '✗',
    'success': 'v' if USE_ASCII_FALLBACKS else '✓',
}
