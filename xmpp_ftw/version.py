"""
Version information for XMPP-FTW.
"""

import os

# Version info - update for releases
VERSION = os.getenv('XMPP_FTW_VERSION', '0.1.0')
APP_NAME = 'XMPP-FTW'

# XEPs with stanza builders or listener support
# Keep this list updated when adding new XEP support
SUPPORTED_XEPS = [
    ('0071', 'XHTML-IM'),
    ('0085', 'Chat State Notifications'),
    ('0175', 'Best Practices for Use of SASL ANONYMOUS'),
    ('0184', 'Message Delivery Receipts'),
    ('0199', 'XMPP Ping'),
    ('0203', 'Delayed Delivery'),
    ('0308', 'Last Message Correction'),
]
