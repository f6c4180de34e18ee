"""
Surface HTTP et WebSocket de Chat Relay.
"""
