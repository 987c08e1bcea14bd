"""
Stanza builders for protocol extensions.

Each module takes a socket request and a stanza, adds or reads the
extension payload, and leaves sending to the caller.
"""

from . import xep_0071, xep_0085, xep_0184, xep_0203, xep_0308

__all__ = ['xep_0071', 'xep_0085', 'xep_0184', 'xep_0203', 'xep_0308']
