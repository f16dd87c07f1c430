"""
Core update engine.

The `Orchestrator` sequences one run: it resolves the manifest, delegates to the
`SelfUpdateManager` and the `BuildUpdateManager`, persists the applied state, and
hands the executable picked by the `LaunchSelector` to the process launcher.
"""
