"""
The framing of the HAN controller's line protocol.
"""
