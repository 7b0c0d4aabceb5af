"""
Adapters for the systems tari-deploy talks to or reads:

- wasm_module    : structural reader for WebAssembly template binaries
- wallet_daemon  : JSON-RPC client for the Tari wallet daemon

Import submodules directly; nothing is loaded eagerly here.
"""

__all__ = ["wasm_module", "wallet_daemon"]
