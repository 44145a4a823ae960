"""Core functionality for WLED control.

This package contains:
- controller: WledController, the synchronisation engine and user commands
- transport: Non-blocking HTTP transport with a single completion callback
- retry: Bounded retry of failed requests
- health: Connection state machine and liveness checks
- scheduler: Named, cancellable timers
- catalog: Effect, palette, preset and playlist catalogs
- resolver: Name-or-id resolution against the catalogs
- synchronizer: Attribute derivation and change-only publishing
- presets: Preset payload construction
- config: Configuration file handling
- logs: Logging setup for the CLI
"""
