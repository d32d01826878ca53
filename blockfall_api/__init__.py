"""WebSocket API for Blockfall."""
