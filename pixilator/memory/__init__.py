"""Client-local memory package.

Holds the bounded generation history kept on the client side (`history`). The
server never reads it; it only mirrors what a client has generated recently.
"""
