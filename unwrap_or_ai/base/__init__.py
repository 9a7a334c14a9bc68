"""Base layer: errors, logging, transport, and request models shared by the
backend client and the recovery resolver."""
