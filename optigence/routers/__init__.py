"""
Routers module - API endpoint handlers organized by feature.

- intent: intent classification and AI usage stats
- suggestions: live action suggestions
- optimail: email assistant, orchestrator, feedback, emotion, diagnostics
- modules: OptiHire, OptiTrip and OptiShop assistants
- cross_module: hand-off of emails to the other modules
"""
